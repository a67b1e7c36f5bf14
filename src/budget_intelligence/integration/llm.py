import os

from openai import OpenAI

from budget_intelligence.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"


class InsightPhraser:
    """Turns rule-based recommendations into a short advisory paragraph."""

    def __init__(self, api_key: str | None = None, model: str = DEFAULT_MODEL, base_url: str | None = None):
        self.client = OpenAI(
            api_key=api_key or os.getenv("OPENAI_API_KEY"),
            base_url=base_url or os.getenv("OPENAI_BASE_URL") or None
        )
        self.model = model

    @classmethod
    def from_env(cls) -> "InsightPhraser | None":
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            return None
        model = os.getenv("OPENAI_MODEL", DEFAULT_MODEL)
        base_url = os.getenv("OPENAI_BASE_URL")
        logger.info(f"Insight phrasing enabled: model={model}, base_url={base_url or 'default'}")
        return cls(api_key=api_key, model=model, base_url=base_url)

    def phrase(self, recommendations: list[str]) -> str | None:
        if not recommendations:
            return None
        try:
            findings = "\n".join(f"- {text}" for text in recommendations)
            prompt = f"""
            Resuma as observações abaixo sobre o orçamento familiar em um parágrafo curto,
            em português, com tom amigável e sugestões práticas. Não invente valores.

            {findings}
            """

            response = self.client.responses.create(
                model=self.model,
                instructions="Você é um assistente financeiro pessoal.",
                input=prompt,
                temperature=0.3
            )
            text = self._extract_output_text(response)
            return text.strip() if text else None
        except Exception as e:
            logger.error(f"LLM Error: {e}")
            return None

    @staticmethod
    def _extract_output_text(response: object) -> str | None:
        output_text = getattr(response, "output_text", None)
        if output_text:
            return output_text

        parts: list[str] = []
        for item in getattr(response, "output", None) or []:
            for block in getattr(item, "content", None) or []:
                if getattr(block, "type", None) in {"output_text", "text"}:
                    text = getattr(block, "text", None)
                    if text:
                        parts.append(text)
        return "".join(parts) or None
