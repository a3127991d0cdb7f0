from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from lexibox.core.errors import NotFoundError
from lexibox.crud import sentence_crud, word_crud
from lexibox.services import association_service
from tests.utils import create_word


@pytest.fixture()
def sentence(db_session):
    return sentence_crud.create_sentence(db_session, "Cats run.")


def test_link_then_unlink_token(db_session, sentence):
    word = create_word(db_session, "cats")

    token = association_service.update_token_word(db_session, sentence.id, 0, word.id)
    assert token.word_id == word.id
    assert token.word.word == "cats"

    fetched = sentence_crud.get_sentence(db_session, sentence.id)
    assert fetched.tokens[0].word_id == word.id
    assert sentence_crud.serialize_token(fetched.tokens[0])["word"] == {
        "word_id": word.id,
        "word": "cats",
        "meaning": "meaning of cats",
        "phonetic": "/cats/",
    }

    token = association_service.update_token_word(db_session, sentence.id, 0, None)
    assert token.word_id is None

    fetched = sentence_crud.get_sentence(db_session, sentence.id)
    payload = sentence_crud.serialize_token(fetched.tokens[0])
    assert payload["word_id"] is None
    assert payload["word"] is None


def test_retarget_keeps_token_fields(db_session, sentence):
    first = create_word(db_session, "cats")
    second = create_word(db_session, "cat")

    association_service.update_token_word(db_session, sentence.id, 0, first.id)
    token = association_service.update_token_word(db_session, sentence.id, 0, second.id)

    assert token.word_id == second.id
    assert token.position == 0
    assert token.token_text == "Cats"
    assert token.token_type.value == "word"


def test_missing_token(db_session, sentence):
    word = create_word(db_session, "cats")

    with pytest.raises(NotFoundError) as exc:
        association_service.update_token_word(db_session, sentence.id, 99, word.id)
    assert exc.value.code == "TOKEN_NOT_FOUND"

    with pytest.raises(NotFoundError) as exc:
        association_service.update_token_word(db_session, sentence.id + 1, 0, None)
    assert exc.value.code == "TOKEN_NOT_FOUND"


def test_missing_word(db_session, sentence):
    with pytest.raises(NotFoundError) as exc:
        association_service.update_token_word(db_session, sentence.id, 0, 404)
    assert exc.value.code == "WORD_NOT_FOUND"
    assert sentence_crud.get_sentence(db_session, sentence.id).tokens[0].word_id is None


def test_deleting_word_unlinks_tokens(db_session, sentence):
    word = create_word(db_session, "cats")
    association_service.update_token_word(db_session, sentence.id, 0, word.id)

    word_crud.delete_word(db_session, word.id)

    fetched = sentence_crud.get_sentence(db_session, sentence.id)
    assert len(fetched.tokens) == 3
    assert fetched.tokens[0].word_id is None
    assert fetched.tokens[0].token_text == "Cats"


def test_find_exact_match_is_case_insensitive(db_session):
    word = create_word(db_session, "Hello")

    assert association_service.find_exact_match(db_session, "hello").id == word.id
    assert association_service.find_exact_match(db_session, "  HELLO ").id == word.id
    assert association_service.find_exact_match(db_session, "hell") is None
    assert association_service.find_exact_match(db_session, "") is None
    assert association_service.find_exact_match(db_session, None) is None


def test_find_exact_match_requires_a_single_candidate(db_session):
    create_word(db_session, "Polish")
    create_word(db_session, "polish")

    assert association_service.find_exact_match(db_session, "POLISH") is None


def test_suggest_links_only_covers_unlinked_word_tokens(db_session):
    cats = create_word(db_session, "cats")
    run = create_word(db_session, "Run")
    sentence = sentence_crud.create_sentence(db_session, "Cats run, cats run.")
    association_service.update_token_word(db_session, sentence.id, 0, cats.id)

    suggestions = association_service.suggest_links(db_session, sentence.id)

    assert suggestions == [
        {"position": 1, "text": "run", "word_id": run.id},
        {"position": 3, "text": "cats", "word_id": cats.id},
        {"position": 4, "text": "run", "word_id": run.id},
    ]
    # Suggestions are never persisted.
    fetched = sentence_crud.get_sentence(db_session, sentence.id)
    assert [token.word_id for token in fetched.tokens] == [cats.id, None, None, None, None, None]


def test_suggest_links_treats_lookup_failures_as_no_match(db_session, sentence, monkeypatch):
    def _broken_lookup(db, text):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(association_service, "find_exact_match", _broken_lookup)

    assert association_service.suggest_links(db_session, sentence.id) == []


def test_suggest_links_for_missing_sentence(db_session):
    with pytest.raises(NotFoundError):
        association_service.suggest_links(db_session, 5)


def test_find_exact_match_folds_case_on_both_sides(db_session):
    word = create_word(db_session, "Éclair")

    assert association_service.find_exact_match(db_session, "Éclair").id == word.id
    assert association_service.find_exact_match(db_session, "ÉCLAIR").id == word.id
