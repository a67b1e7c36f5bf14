import pytest

from budget_intelligence.classifiers.keywords import KeywordRuleTable
from budget_intelligence.core import settings
from budget_intelligence.core.tuning import EngineTuning
from budget_intelligence.manager import IntelligenceEngine
from budget_intelligence.storage.json_store import JsonFileStore


def test_read_config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "# comment\n"
        "ANOMALY_THRESHOLD: 2.5 # inline\n"
        'OPENAI_MODEL: "gpt-4o # not a comment"\n'
        "EMPTY:\n"
        "not a pair\n",
        encoding="utf-8",
    )

    values = settings.read_config_file(str(path))

    assert values == {"ANOMALY_THRESHOLD": "2.5", "OPENAI_MODEL": "gpt-4o # not a comment"}


def test_missing_config_file():
    assert settings.read_config_file(None) == {}


def test_env_int_validation(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ANOMALY_MIN_SAMPLES", "abc")
    assert settings.get_env_int("ANOMALY_MIN_SAMPLES", 3, min_value=1) == 3
    monkeypatch.setenv("ANOMALY_MIN_SAMPLES", "0")
    assert settings.get_env_int("ANOMALY_MIN_SAMPLES", 3, min_value=1) == 3
    monkeypatch.setenv("ANOMALY_MIN_SAMPLES", "5")
    assert settings.get_env_int("ANOMALY_MIN_SAMPLES", 3, min_value=1) == 5


def test_mask_sensitive_values():
    assert settings.mask_env_value("OPENAI_API_KEY", "sk-abcdef") == "sk...ef"
    assert settings.mask_env_value("LOG_LEVEL", "DEBUG") == "DEBUG"


def test_tuning_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("KEYWORD_CONFIDENCE", "65")
    monkeypatch.setenv("ANOMALY_THRESHOLD", "3")
    monkeypatch.delenv("MIN_MATCH_SCORE", raising=False)

    tuning = EngineTuning.from_env()

    assert tuning.keyword_confidence == 65
    assert tuning.anomaly_threshold == 3.0
    assert tuning.min_match_score == 30


def test_env_int_upper_bound(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("KEYWORD_CONFIDENCE", "150")
    assert settings.get_env_int("KEYWORD_CONFIDENCE", 70, min_value=0, max_value=100) == 70
    monkeypatch.setenv("KEYWORD_CONFIDENCE", "100")
    assert settings.get_env_int("KEYWORD_CONFIDENCE", 70, min_value=0, max_value=100) == 100


def test_out_of_range_keyword_confidence_falls_back(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("KEYWORD_CONFIDENCE", "150")
    monkeypatch.setenv("MIN_MATCH_SCORE", "101")
    monkeypatch.delenv("KEYWORD_RULES_FILE", raising=False)

    assert EngineTuning.from_env().keyword_confidence == 70
    assert EngineTuning.from_env().min_match_score == 30

    engine = IntelligenceEngine.from_env(JsonFileStore())
    suggestions = engine.classify(1, "ifood almoço", -4500)

    assert ("Restaurante", 70) in [(s.category_name, s.confidence) for s in suggestions]


def test_keyword_table_clamps_confidence():
    assert KeywordRuleTable(confidence=150).confidence == 100


def test_engine_from_env_loads_rules_file(tmp_path, monkeypatch: pytest.MonkeyPatch):
    rules = tmp_path / "rules.json"
    rules.write_text('{"pet": "Pets"}', encoding="utf-8")
    monkeypatch.setenv("KEYWORD_RULES_FILE", str(rules))
    monkeypatch.setenv("KEYWORD_CONFIDENCE", "75")

    engine = IntelligenceEngine.from_env(JsonFileStore())
    (suggestion,) = engine.classify(1, "Pet Shop", -5000)

    assert (suggestion.category_name, suggestion.confidence) == ("Pets", 75)
