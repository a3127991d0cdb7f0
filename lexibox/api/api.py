from fastapi import APIRouter
from .endpoints import (
    dictionary_router,
    pronunciation_rule_router,
    sentence_router,
    word_plan_router,
    word_router,
)

api_router = APIRouter()

api_router.include_router(sentence_router.router, prefix="/sentences", tags=["Sentences"])
api_router.include_router(word_router.router, prefix="/words", tags=["Words"])
api_router.include_router(dictionary_router.router, prefix="/dictionaries", tags=["Dictionaries"])
api_router.include_router(
    dictionary_router.association_router,
    prefix="/dictionary-words",
    tags=["Dictionaries"],
)
api_router.include_router(word_plan_router.router, prefix="/word-plans", tags=["Word plans"])
api_router.include_router(
    pronunciation_rule_router.router,
    prefix="/pronunciation-rules",
    tags=["Pronunciation rules"],
)
