from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..services.llm_provider import LLMError, LLMProvider
from ..utils.logging import get_logger

logger = get_logger(__name__)

NO_INFORMATION_TEXT = "I could not find any relevant data to answer that right now."

UNCERTAIN_PHRASES = (
    "i don't know",
    "i do not know",
    "i don’t know",
    "i'm not sure",
    "i am not sure",
    "i cannot determine",
    "i can't determine",
    "not enough information",
    "context does not",
    "context doesn't",
    "context doesn’t",
    "no information about",
    "does not mention",
    "doesn't mention",
)

SYSTEM_PROMPT = """You are a friendly engineering team assistant answering questions about team standups.

Rules:
- Use ONLY the facts in the provided context. Never invent people, dates, tickets or reasons.
- If the context does not answer the question, reply with exactly: I don't know.
- Answer directly and conversationally; don't say "according to the data".
- Keep status answers to 2-3 sentences; historical questions may take 3-4.
- Mention blockers empathetically when present."""


@dataclass(frozen=True)
class Synthesis:
    text: str
    model_answer: Optional[str] = None

    @property
    def used_model(self) -> bool:
        return self.model_answer is not None


def join_contexts(contexts: Sequence[str]) -> str:
    return "\n\n".join(context for context in contexts if context)


def is_uncertain(answer: str) -> bool:
    normalized = answer.lower()
    return any(phrase in normalized for phrase in UNCERTAIN_PHRASES)


def build_prompt(question: str, context_text: str) -> str:
    return f"""Question: {question}

Context Data:
{context_text}

Answer the question using only the context above:"""


class ResponseSynthesizer:
    """Turns grounded context into a reply, with the model as an optional layer"""

    def __init__(self, llm: Optional[LLMProvider] = None, temperature: float = 0.2, max_tokens: int = 300):
        self.llm = llm
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def model_available(self) -> bool:
        return self.llm is not None and self.llm.is_configured

    async def synthesize(self, question: str, contexts: List[str]) -> Synthesis:
        context_text = join_contexts(contexts)
        if not context_text:
            return Synthesis(text=NO_INFORMATION_TEXT)

        if not self.model_available:
            return Synthesis(text=context_text)

        try:
            response = await self.llm.generate_completion(
                prompt=build_prompt(question, context_text),
                system_prompt=SYSTEM_PROMPT,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except LLMError as e:
            logger.error(f"Error generating AI response: {e}")
            return Synthesis(text=context_text)

        answer = (response.get("content") or "").strip()
        if not answer or is_uncertain(answer):
            logger.info("Discarding non-answer from model, using raw context")
            return Synthesis(text=context_text)

        return Synthesis(text=answer, model_answer=answer)
