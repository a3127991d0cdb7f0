from lexibox.models.sentence_model import TokenType
from lexibox.services.tokenizer import tokenize


def _triples(text):
    return [(token.position, token.text, token.type.value) for token in tokenize(text)]


def test_sentence_with_punctuation():
    assert _triples("Hello, world! How are you?") == [
        (0, "Hello", "word"),
        (1, ",", "punctuation"),
        (2, "world", "word"),
        (3, "!", "punctuation"),
        (4, "How", "word"),
        (5, "are", "word"),
        (6, "you", "word"),
        (7, "?", "punctuation"),
    ]


def test_contraction_is_single_word():
    assert _triples("don't stop") == [(0, "don't", "word"), (1, "stop", "word")]


def test_consecutive_punctuation_collapses():
    assert _triples("Really?!") == [(0, "Really", "word"), (1, "?!", "punctuation")]


def test_digits_are_punctuation():
    assert _triples("3 cats") == [(0, "3", "punctuation"), (1, "cats", "word")]


def test_apostrophe_never_joins_punctuation():
    assert _triples("?'") == [(0, "?", "punctuation"), (1, "'", "word")]


def test_letters_and_digits_split_without_whitespace():
    assert _triples("abc123def") == [
        (0, "abc", "word"),
        (1, "123", "punctuation"),
        (2, "def", "word"),
    ]


def test_empty_and_non_string_input_yield_no_tokens():
    assert tokenize("") == []
    assert tokenize(None) == []
    assert tokenize(42) == []
    assert tokenize("   \t\n ") == []


def test_tokenize_is_pure():
    text = "It's 5 o'clock -- time for tea."
    assert tokenize(text) == tokenize(text)


def test_positions_are_contiguous():
    tokens = tokenize("  One, two;   three...  four ")
    assert [token.position for token in tokens] == list(range(len(tokens)))


def test_tokens_cover_every_non_whitespace_character():
    text = "Well -- that's odd, isn't it? 42!"
    tokens = tokenize(text)
    assert "".join(token.text for token in tokens) == "".join(text.split())
    for token in tokens:
        is_word = all(char.isascii() and (char.isalpha() or char == "'") for char in token.text)
        expected = TokenType.WORD if is_word else TokenType.PUNCTUATION
        assert token.type == expected


def test_as_dict_shape():
    assert tokenize("Hi.")[1].as_dict() == {"position": 1, "text": ".", "type": "punctuation"}
