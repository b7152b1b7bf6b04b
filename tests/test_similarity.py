"""
Tests for text normalization and Jaccard similarity.
"""

import pytest

from idea_analysis.similarity import jaccard_similarity, normalize_text, tokenize


def test_normalize_text_lowercases_and_strips_punctuation():
    assert normalize_text("  Hello,   World!! ") == "hello world"


def test_normalize_text_of_punctuation_only_is_empty():
    assert normalize_text("!!! ???") == ""


def test_tokenize_drops_stopwords_and_single_characters():
    assert tokenize("The cat is on a mat, x") == ["cat", "mat"]


def test_identical_texts_are_fully_similar():
    assert jaccard_similarity("Build an AI tool", "build an ai tool!") == 1.0


def test_partial_overlap():
    # {build, mobile, app} vs {build, web, app}
    assert jaccard_similarity("build mobile app", "build web app") == pytest.approx(0.5)


def test_two_empty_texts_are_identical():
    assert jaccard_similarity("", "!!!") == 1.0


def test_one_empty_text_is_dissimilar():
    assert jaccard_similarity("hello world", "") == 0.0
    assert jaccard_similarity("the a an", "hello world") == 0.0


def test_similarity_is_symmetric():
    first = "automate code review for python teams"
    second = "python code review bot"
    assert jaccard_similarity(first, second) == jaccard_similarity(second, first)
