"""Utility helpers for test factories."""

from __future__ import annotations

from lexibox.models.dictionary_model import Dictionary
from lexibox.models.word_model import Word


def create_word(db, word: str = "hello", **kwargs) -> Word:
    defaults = {
        "word": word,
        "phonetic": f"/{word}/",
        "meaning": f"meaning of {word}",
        "difficulty": 0,
        "is_mastered": False,
    }
    defaults.update(kwargs)
    entry = Word(**defaults)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def create_dictionary(db, name: str = "Core", **kwargs) -> Dictionary:
    defaults = {
        "name": name,
        "description": kwargs.pop("description", None),
        "is_enabled": kwargs.pop("is_enabled", True),
        "is_mastered": kwargs.pop("is_mastered", False),
    }
    defaults.update(kwargs)
    dictionary = Dictionary(**defaults)
    db.add(dictionary)
    db.commit()
    db.refresh(dictionary)
    return dictionary
