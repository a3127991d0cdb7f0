from __future__ import annotations

import pytest

from lexibox.core.errors import ConflictError, NotFoundError, ValidationError
from lexibox.crud import pronunciation_rule_crud, word_crud
from lexibox.models.pronunciation_rule_model import PronunciationRule, WordPronunciationRule
from lexibox.schemas.pronunciation_rule_schema import (
    PronunciationRuleCreate,
    PronunciationRuleUpdate,
    WordRulesAttach,
)
from tests.utils import create_word


def _rule(db, combination="ph", pronunciation="/f/", description=None):
    return pronunciation_rule_crud.create_rule(
        db,
        PronunciationRuleCreate(
            letterCombination=combination,
            pronunciation=pronunciation,
            ruleDescription=description,
        ),
    )


def test_create_rule_strips_fields(db_session):
    rule = _rule(db_session, "  ph ", " /f/ ", "   ")
    assert (rule.letter_combination, rule.pronunciation, rule.rule_description) == ("ph", "/f/", None)
    assert rule.created_at is not None


def test_duplicate_rule_is_a_conflict(db_session):
    _rule(db_session)
    with pytest.raises(ConflictError) as exc:
        _rule(db_session)
    assert exc.value.code == "PRONUNCIATION_RULE_ALREADY_EXISTS"

    # Same letters with another sound is a distinct rule.
    assert _rule(db_session, "ph", "/p/").id is not None


def test_list_rules_searches_and_counts_words(db_session):
    ph = _rule(db_session, "ph", "/f/", "as in phone")
    _rule(db_session, "ch", "/k/", "as in school")
    word = create_word(db_session, "phone")
    pronunciation_rule_crud.attach_rules(db_session, word.id, WordRulesAttach(pronunciationRuleIds=[ph.id]))

    items, total = pronunciation_rule_crud.list_rules(db_session, page=1, limit=20)
    assert total == 2
    assert [(i["letterCombination"], i["wordCount"]) for i in items] == [("ch", 0), ("ph", 1)]

    items, total = pronunciation_rule_crud.list_rules(db_session, page=1, limit=20, search="SCHOOL")
    assert total == 1
    assert items[0]["pronunciation"] == "/k/"

    items, total = pronunciation_rule_crud.list_rules(db_session, page=2, limit=1)
    assert total == 2
    assert [i["letterCombination"] for i in items] == ["ph"]


def test_rules_by_combination(db_session):
    _rule(db_session, "gh", "/f/")
    _rule(db_session, "gh", "/g/")
    _rule(db_session, "ph", "/f/")

    rules = pronunciation_rule_crud.list_rules_by_combination(db_session, "gh")
    assert [r["pronunciation"] for r in rules] == ["/f/", "/g/"]
    assert pronunciation_rule_crud.list_rules_by_combination(db_session, "zz") == []


def test_update_rule(db_session):
    rule = _rule(db_session)
    updated = pronunciation_rule_crud.update_rule(
        db_session, rule.id, PronunciationRuleUpdate(ruleDescription="phone, graph")
    )
    assert updated.rule_description == "phone, graph"
    assert updated.letter_combination == "ph"


def test_update_rule_errors(db_session):
    rule = _rule(db_session, "ph", "/f/")
    other = _rule(db_session, "ph", "/p/")

    with pytest.raises(ValidationError) as exc:
        pronunciation_rule_crud.update_rule(db_session, rule.id, PronunciationRuleUpdate())
    assert exc.value.code == "INVALID_UPDATE"

    with pytest.raises(ValidationError):
        pronunciation_rule_crud.update_rule(
            db_session, rule.id, PronunciationRuleUpdate(pronunciation=None)
        )

    with pytest.raises(ConflictError):
        pronunciation_rule_crud.update_rule(
            db_session, other.id, PronunciationRuleUpdate(pronunciation="/f/")
        )
    assert pronunciation_rule_crud.get_rule(db_session, other.id).pronunciation == "/p/"

    with pytest.raises(NotFoundError) as exc:
        pronunciation_rule_crud.update_rule(db_session, 999, PronunciationRuleUpdate(pronunciation="/x/"))
    assert exc.value.code == "PRONUNCIATION_RULE_NOT_FOUND"


def test_attach_rules_skips_existing_links(db_session):
    word = create_word(db_session, "photograph")
    ph = _rule(db_session, "ph", "/f/")
    gr = _rule(db_session, "gr", "/gr/")

    created, links = pronunciation_rule_crud.attach_rules(
        db_session, word.id, WordRulesAttach(pronunciationRuleIds=[ph.id], positionInWord=0)
    )
    assert created == 1

    created, links = pronunciation_rule_crud.attach_rules(
        db_session, word.id, WordRulesAttach(pronunciationRuleIds=[ph.id, gr.id, gr.id])
    )
    assert created == 1
    serialized = [pronunciation_rule_crud.serialize_word_rule(link) for link in links]
    assert [(s["letterCombination"], s["positionInWord"]) for s in serialized] == [
        ("gr", None),
        ("ph", 0),
    ]


def test_attach_rules_validates_word_and_rules(db_session):
    word = create_word(db_session, "phone")
    ph = _rule(db_session)

    with pytest.raises(NotFoundError) as exc:
        pronunciation_rule_crud.attach_rules(
            db_session, word.id, WordRulesAttach(pronunciationRuleIds=[ph.id, 404])
        )
    assert exc.value.code == "PRONUNCIATION_RULE_NOT_FOUND"
    assert exc.value.details == {"rule_ids": [404]}
    assert db_session.query(WordPronunciationRule).count() == 0

    with pytest.raises(NotFoundError) as exc:
        pronunciation_rule_crud.attach_rules(db_session, 999, WordRulesAttach(pronunciationRuleIds=[ph.id]))
    assert exc.value.code == "WORD_NOT_FOUND"


def test_words_for_rule(db_session):
    ph = _rule(db_session)
    for name in ("phone", "graph", "alpha"):
        word = create_word(db_session, name)
        pronunciation_rule_crud.attach_rules(
            db_session, word.id, WordRulesAttach(pronunciationRuleIds=[ph.id])
        )

    items, total = pronunciation_rule_crud.list_words_for_rule(db_session, ph.id, page=1, limit=2)
    assert total == 3
    assert [item["word"] for item in items] == ["alpha", "graph"]
    assert items[0]["meaning"] == "meaning of alpha"


def test_detach_rule(db_session):
    word = create_word(db_session, "phone")
    ph = _rule(db_session)
    pronunciation_rule_crud.attach_rules(db_session, word.id, WordRulesAttach(pronunciationRuleIds=[ph.id]))

    pronunciation_rule_crud.detach_rule(db_session, word.id, ph.id)
    assert pronunciation_rule_crud.list_word_rules(db_session, word.id) == []

    with pytest.raises(NotFoundError) as exc:
        pronunciation_rule_crud.detach_rule(db_session, word.id, ph.id)
    assert exc.value.code == "ASSOCIATION_NOT_FOUND"


def test_deleting_rule_or_word_drops_links(db_session):
    phone = create_word(db_session, "phone")
    graph = create_word(db_session, "graph")
    ph = _rule(db_session)
    gr = _rule(db_session, "gr", "/gr/")
    for word in (phone, graph):
        pronunciation_rule_crud.attach_rules(
            db_session, word.id, WordRulesAttach(pronunciationRuleIds=[ph.id, gr.id])
        )

    pronunciation_rule_crud.delete_rule(db_session, gr.id)
    assert db_session.query(WordPronunciationRule).count() == 2

    word_crud.delete_word(db_session, phone.id)
    assert db_session.query(WordPronunciationRule).count() == 1
    assert db_session.query(PronunciationRule).count() == 1


# ----------------------------------------------------------------------
# HTTP
# ----------------------------------------------------------------------
def test_pronunciation_rule_flow_over_http(client, db_session):
    word = create_word(db_session, "phone")

    response = client.post(
        "/api/pronunciation-rules",
        json={"letterCombination": "ph", "pronunciation": "/f/", "ruleDescription": "as in phone"},
    )
    assert response.status_code == 201
    rule = response.json()["data"]
    assert rule["wordCount"] == 0

    duplicate = client.post(
        "/api/pronunciation-rules", json={"letterCombination": "ph", "pronunciation": "/f/"}
    )
    assert duplicate.status_code == 409
    assert duplicate.json() == {
        "success": False,
        "message": "This pronunciation rule already exists.",
        "code": "PRONUNCIATION_RULE_ALREADY_EXISTS",
    }

    response = client.post(
        f"/api/words/{word.id}/pronunciation-rules",
        json={"pronunciationRuleIds": [rule["id"]], "positionInWord": 0},
    )
    assert response.status_code == 200
    assert response.json()["data"][0]["letterCombination"] == "ph"

    assert client.get(f"/api/pronunciation-rules/{rule['id']}").json()["data"]["wordCount"] == 1
    by_combination = client.get("/api/pronunciation-rules/by-combination/ph").json()["data"]
    assert [r["id"] for r in by_combination] == [rule["id"]]

    words = client.get(f"/api/pronunciation-rules/{rule['id']}/words").json()["data"]
    assert words["total"] == 1
    assert words["items"][0]["positionInWord"] == 0

    listed = client.get("/api/pronunciation-rules", params={"search": "phone"}).json()["data"]
    assert listed["total"] == 1

    response = client.put(f"/api/pronunciation-rules/{rule['id']}", json={"pronunciation": "/ff/"})
    assert response.json()["data"]["pronunciation"] == "/ff/"
    assert response.json()["data"]["wordCount"] == 1

    assert client.get(f"/api/words/{word.id}/pronunciation-rules").json()["data"][0]["pronunciation"] == "/ff/"

    response = client.delete(f"/api/words/{word.id}/pronunciation-rules/{rule['id']}")
    assert response.status_code == 200
    assert client.get(f"/api/words/{word.id}/pronunciation-rules").json()["data"] == []

    assert client.delete(f"/api/pronunciation-rules/{rule['id']}").status_code == 200
    response = client.get(f"/api/pronunciation-rules/{rule['id']}")
    assert response.status_code == 404
    assert response.json()["code"] == "PRONUNCIATION_RULE_NOT_FOUND"


@pytest.mark.parametrize(
    "method, url, body",
    [
        ("post", "/api/pronunciation-rules", {"letterCombination": "", "pronunciation": "/f/"}),
        ("post", "/api/pronunciation-rules", {"letterCombination": "x" * 51, "pronunciation": "/f/"}),
        ("post", "/api/pronunciation-rules", {"letterCombination": "ph"}),
        ("get", "/api/pronunciation-rules/0", None),
        ("get", "/api/pronunciation-rules/18446744073709551616", None),
        ("post", "/api/words/1/pronunciation-rules", {"pronunciationRuleIds": []}),
        ("post", "/api/words/1/pronunciation-rules", {"pronunciationRuleIds": [0]}),
    ],
)
def test_pronunciation_rule_requests_are_validated(client, method, url, body):
    kwargs = {"json": body} if body is not None else {}
    response = client.request(method.upper(), url, **kwargs)
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
