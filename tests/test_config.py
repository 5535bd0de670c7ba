"""Tests for configuration and languages."""

from argparse import Namespace

import pytest

from srt_batch_translator.config import TranslatorConfig
from srt_batch_translator.languages import language_name, parse_language_list

ENV_VARS = (
    "TRANSLATE_LANGUAGES", "TRANSLATE_SERVICE", "TRANSLATE_CONCURRENCY", "DEBUG",
    "AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_SESSION_TOKEN", "AWS_PROFILE",
    "AWS_REGION", "LLM_API_KEY", "OPENAI_API_KEY", "LLM_BASE_URL", "LLM_MODEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestParseLanguageList:

    def test_default_order_kept(self):
        assert list(parse_language_list("fr,nl,de")) == ["fr", "nl", "de"]

    def test_whitespace_and_case(self):
        assert parse_language_list(" ES , Fr ") == {"es": "Spanish", "fr": "French"}

    def test_unknown_codes_skipped(self):
        assert parse_language_list("xx,fr,") == {"fr": "French"}

    def test_duplicates(self):
        assert list(parse_language_list("fr,de,fr")) == ["fr", "de"]

    def test_language_name(self):
        assert language_name("ja") == "Japanese"
        assert language_name("xx") == "xx"


class TestTranslatorConfig:

    def test_defaults(self):
        config = TranslatorConfig()
        assert list(config.languages) == ["fr", "nl", "de", "ar", "ja", "da"]
        assert config.service == "claude"
        assert config.concurrency == 1
        assert config.validate() is None

    def test_aws_defaults_to_unbounded(self):
        assert TranslatorConfig(service="aws").concurrency == 0

    def test_env(self, monkeypatch):
        monkeypatch.setenv("TRANSLATE_LANGUAGES", "es")
        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKID")
        monkeypatch.setenv("TRANSLATE_CONCURRENCY", "4")
        config = TranslatorConfig(service="aws")
        assert config.languages == {"es": "Spanish"}
        assert config.aws_access_key_id == "AKID"
        assert config.concurrency == 4

    def test_invalid_concurrency_env_reported(self, monkeypatch, caplog):
        monkeypatch.setenv("TRANSLATE_CONCURRENCY", "four")
        with caplog.at_level("WARNING"):
            config = TranslatorConfig(service="aws")

        assert "TRANSLATE_CONCURRENCY must be an integer" in config.validate()
        assert "TRANSLATE_CONCURRENCY" in caplog.text

    def test_explicit_concurrency_ignores_env(self, monkeypatch):
        monkeypatch.setenv("TRANSLATE_CONCURRENCY", "four")
        config = TranslatorConfig(service="aws", concurrency=3)
        assert config.validate() is None

    def test_from_args(self, monkeypatch):
        monkeypatch.setenv("TRANSLATE_SERVICE", "aws")
        args = Namespace(
            directory="/videos", languages="de", service=None, source_suffix=None,
            region="eu-west-1", profile=None, api_key=None, base_url=None, model_name=None,
            concurrency=None, chunk_bytes=2000, batch_size=5, progress_every=3,
            progress_bar=False, verbose=False,
        )
        config = TranslatorConfig.from_args(args)
        assert config.service == "aws"
        assert config.directory == "/videos"
        assert config.languages == {"de": "German"}
        assert config.region == "eu-west-1"
        assert config.chunk_bytes == 2000
        assert config.concurrency == 0
        assert config.validate() is None

    def test_debug_env_enables_verbose(self, monkeypatch):
        monkeypatch.setenv("DEBUG", "1")
        config = TranslatorConfig.from_args(Namespace())
        assert config.verbose

    @pytest.mark.parametrize("kwargs, message", [
        ({"service": "babel"}, "Unknown translation service"),
        ({"concurrency": -1}, "Concurrency"),
        ({"chunk_bytes": 20000}, "Chunk bytes"),
        ({"batch_size": 0}, "Batch size"),
        ({"service": "openai", "model_name": "m"}, "API key"),
        ({"service": "openai", "api_key": "k"}, "Model name"),
    ])
    def test_validate(self, kwargs, message):
        error = TranslatorConfig(**kwargs).validate()
        assert message in error

    def test_no_languages(self, monkeypatch):
        monkeypatch.setenv("TRANSLATE_LANGUAGES", "xx,yy")
        assert "No valid language codes" in TranslatorConfig().validate()
