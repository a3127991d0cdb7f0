"""Declares every SQLAlchemy model so ``Base.metadata`` knows about all tables."""

from lexibox.db.base_class import Base

# Word catalog
from lexibox.models.word_model import Word

# Dictionaries
from lexibox.models.dictionary_model import Dictionary, DictionaryWord

# Sentences & tokens
from lexibox.models.sentence_model import Sentence, SentenceToken

# Study plans
from lexibox.models.word_plan_model import ErrorWord, LearningRecord, WordPlan, WordPlanWord

# Pronunciation rules
from lexibox.models.pronunciation_rule_model import PronunciationRule, WordPronunciationRule

__all__ = (
    "Base",
    "Word",
    "Dictionary",
    "DictionaryWord",
    "Sentence",
    "SentenceToken",
    "WordPlan",
    "WordPlanWord",
    "LearningRecord",
    "ErrorWord",
    "PronunciationRule",
    "WordPronunciationRule",
)
