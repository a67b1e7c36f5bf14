import json
from dataclasses import dataclass

from budget_intelligence.domain.text import infer_category_type
from budget_intelligence.logger import get_logger
from budget_intelligence.models import LearnSource, Suggestion, Transaction

from .base import Classifier

logger = get_logger(__name__)


@dataclass(frozen=True)
class KeywordRule:
    keyword: str
    category_name: str


def _rules(category_name: str, *keywords: str) -> tuple[KeywordRule, ...]:
    return tuple(KeywordRule(keyword, category_name) for keyword in keywords)


DEFAULT_KEYWORD_RULES: tuple[KeywordRule, ...] = (
    *_rules("Supermercado", "supermercado", "mercado", "grocery", "padaria", "acougue", "hortifruti"),
    *_rules("Restaurante", "restaurante", "bar", "pizza", "lanchonete", "ifood", "rappi"),
    *_rules(
        "Transporte",
        "posto", "combustivel", "uber", "99", "gasolina", "taxi", "onibus", "metro",
        "estacionamento", "pedagio",
    ),
    *_rules("Moradia", "aluguel", "condominio", "energia", "luz", "agua", "gas", "internet", "telefone"),
    *_rules("Saúde", "farmacia", "remedio", "medico", "hospital", "clinica", "laboratorio", "exame", "consulta"),
    *_rules("Lazer", "cinema", "viagem", "hotel", "passeio", "show", "teatro", "parque"),
    *_rules("Educação", "faculdade", "curso", "livro", "escola", "universidade", "material escolar"),
    *_rules("Tecnologia", "streaming", "netflix", "spotify", "amazon", "apple", "google"),
    *_rules("Vestuário", "roupa", "calcado", "sapato", "loja"),
    *_rules("Investimento", "invest", "acao", "fundo", "poupanca", "previdencia"),
)


class KeywordRuleTable(Classifier):
    """Ordered, read-only substring rules shared by every request."""

    def __init__(self, rules: tuple[KeywordRule, ...] = DEFAULT_KEYWORD_RULES, confidence: int = 70):
        self._rules = tuple(
            KeywordRule(rule.keyword.lower(), rule.category_name) for rule in rules
        )
        self.confidence = max(0, min(100, confidence))

    @property
    def rules(self) -> tuple[KeywordRule, ...]:
        return self._rules

    def matching_categories(self, description: str) -> list[str]:
        lowered = description.lower()
        names: list[str] = []
        for rule in self._rules:
            if rule.keyword in lowered and rule.category_name not in names:
                names.append(rule.category_name)
        return names

    def first_match(self, description: str) -> str | None:
        lowered = description.lower()
        for rule in self._rules:
            if rule.keyword in lowered:
                return rule.category_name
        return None

    def classify(self, user_id: int, transaction: Transaction) -> list[Suggestion]:
        return [
            Suggestion(
                category_name=name,
                category_type=infer_category_type(name, transaction.amount),
                confidence=self.confidence,
            )
            for name in self.matching_categories(transaction.description)
        ]

    def learn(
        self,
        user_id: int,
        transaction: Transaction,
        category_id: int,
        source: LearnSource = "manual",
    ) -> None:
        # Static table; user corrections are learned by the history matcher.
        pass


def load_keyword_rules(path: str) -> tuple[KeywordRule, ...]:
    """Load rules from a JSON object of ``{"keyword": "Category"}`` pairs.

    Order of the object is kept, since earlier keywords win in simple mode.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Keyword rules in {path} must be a JSON object")
    rules = tuple(
        KeywordRule(str(keyword).strip().lower(), str(category))
        for keyword, category in data.items()
        if str(keyword).strip()
    )
    logger.info("[KEYWORDS] Loaded %d keyword rules from %s", len(rules), path)
    return rules
