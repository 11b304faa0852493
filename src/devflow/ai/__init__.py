from .schemas import AnswerDraftRequest
from .service import format_answer, generate_answer

__all__ = [
    "AnswerDraftRequest",
    "format_answer",
    "generate_answer",
]
