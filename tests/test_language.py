"""Tests for language resolution."""

import pytest

from claude_cmd.config import Config, ConfigScope, ConfigStore
from claude_cmd.errors import CommandError, ErrorKind
from claude_cmd.language import (
    COMMON_LANGUAGES,
    LanguageResolver,
    get_language_name,
    parse_locale,
    sanitize_language_code,
)


@pytest.fixture
def user_store(tmp_path):
    return ConfigStore(tmp_path / "user.yaml", ConfigScope.USER)


@pytest.fixture
def project_store(tmp_path):
    return ConfigStore(tmp_path / "project" / ".claude" / "claude-cmd.yaml", ConfigScope.PROJECT)


@pytest.fixture
def environ():
    return {}


@pytest.fixture
def resolver(user_store, project_store, environ):
    return LanguageResolver(user_store, project_store, environ=environ)


class TestHelpers:
    """Tests for code and locale helpers."""

    @pytest.mark.parametrize("raw,expected", [("FR", "fr"), (" de ", "de"), ("fil", "fil"), ("", ""), ("e", ""), ("engl", ""), ("e1", ""), (None, "")])
    def test_sanitize(self, raw, expected):
        """Happy: codes are normalized, invalid ones become empty."""
        assert sanitize_language_code(raw) == expected

    @pytest.mark.parametrize("locale,expected", [("fr_FR.UTF-8", "fr"), ("de_DE@euro", "de"), ("pt-BR", "pt"), ("ja", "ja"), ("EN_us.utf8", "en")])
    def test_parse_locale(self, locale, expected):
        """Happy: the language part of a POSIX locale is extracted."""
        assert parse_locale(locale) == expected

    @pytest.mark.parametrize("locale", ["", "C", "POSIX", "c.UTF-8", "_US", "1234"])
    def test_parse_locale_rejects(self, locale):
        """Failure: unusable locales raise ValueError."""
        with pytest.raises(ValueError):
            parse_locale(locale)

    def test_language_name(self):
        """Happy: known codes have names, unknown ones are upper-cased."""
        assert get_language_name("fr") == "Français"
        assert get_language_name("xx") == "XX"


class TestEffectiveLanguage:
    """Tests for LanguageResolver.get_effective_language() precedence."""

    def test_default(self, resolver):
        """Happy: nothing configured resolves to en."""
        assert resolver.get_effective_language() == "en"

    def test_override_wins(self, resolver, user_store, project_store, environ):
        """Happy: the explicit override beats every other source."""
        user_store.set_config(Config(preferred_language="de"))
        project_store.set_config(Config(preferred_language="es"))
        environ["CLAUDE_CMD_LANG"] = "it"

        assert resolver.get_effective_language("FR") == "fr"

    def test_project_over_user(self, resolver, user_store, project_store):
        """Happy: project config beats user config."""
        user_store.set_config(Config(preferred_language="de"))
        project_store.set_config(Config(preferred_language="es"))

        assert resolver.get_effective_language() == "es"

    def test_user_over_environment(self, resolver, user_store, environ):
        """Happy: user config beats the environment."""
        user_store.set_config(Config(preferred_language="de"))
        environ["CLAUDE_CMD_LANG"] = "it"

        assert resolver.get_effective_language() == "de"

    def test_env_var_over_locale(self, resolver, environ):
        """Happy: CLAUDE_CMD_LANG beats the locale."""
        environ["CLAUDE_CMD_LANG"] = "it"
        environ["LANG"] = "fr_FR.UTF-8"

        assert resolver.get_effective_language() == "it"

    def test_locale_order(self, resolver, environ):
        """Happy: LC_ALL beats LANG."""
        environ["LANG"] = "fr_FR.UTF-8"
        environ["LC_ALL"] = "ko_KR.UTF-8"

        assert resolver.get_effective_language() == "ko"

    def test_c_locale_falls_back(self, resolver, environ):
        """Happy: the C locale resolves to en."""
        environ["LANG"] = "C"
        assert resolver.get_effective_language() == "en"

    def test_invalid_values_are_skipped(self, resolver, user_store, project_store, environ):
        """Failure: invalid codes in a tier fall through to the next one."""
        project_store.set_config(Config(preferred_language="not-a-code"))
        user_store.set_config(Config(preferred_language="123"))
        environ["CLAUDE_CMD_LANG"] = "zh"

        assert resolver.get_effective_language("??") == "zh"

    def test_malformed_config_falls_through(self, resolver, project_store, user_store):
        """Failure: an unparseable project config is ignored."""
        project_store.path.parent.mkdir(parents=True)
        project_store.path.write_text("preferred_language: [unclosed")
        user_store.set_config(Config(preferred_language="nl"))

        assert resolver.get_effective_language() == "nl"


    def test_undecodable_config_falls_through(self, resolver, project_store, user_store):
        """Failure: a project config that isn't UTF-8 is ignored."""
        project_store.path.parent.mkdir(parents=True)
        project_store.path.write_bytes(b"preferred_language: \xff\xfe")
        user_store.set_config(Config(preferred_language="fr"))

        assert resolver.get_effective_language() == "fr"


class TestEffectiveConfig:
    """Tests for get_effective_config()."""

    def test_project_overlays_user(self, resolver, user_store, project_store):
        """Happy: project keys win, user keys fill the gaps."""
        user_store.set_config(Config(preferred_language="de", repository_url="https://user"))
        project_store.set_config(Config(preferred_language="es"))

        config = resolver.get_effective_config()

        assert config.preferred_language == "es"
        assert config.repository_url == "https://user"

    def test_no_configs(self, resolver):
        """Happy: missing configs give an empty config."""
        assert resolver.get_effective_config() == Config()


class TestSetLanguage:
    """Tests for set_language()."""

    def test_user_scope(self, resolver, user_store):
        """Happy: the sanitized code is saved to the user config."""
        assert resolver.set_language(" FR ") == "fr"
        assert user_store.get_config().preferred_language == "fr"

    def test_project_scope(self, resolver, project_store, user_store):
        """Happy: project scope writes only the project config."""
        resolver.set_language("ja", ConfigScope.PROJECT)

        assert project_store.get_config().preferred_language == "ja"
        assert user_store.get_config() is None

    def test_invalid_code(self, resolver, user_store):
        """Failure: a malformed code is rejected and nothing is written."""
        with pytest.raises(CommandError) as exc_info:
            resolver.set_language("french")

        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert not user_store.path.exists()


class TestLanguageStatus:
    """Tests for availability views."""

    def test_available_languages(self, resolver):
        """Happy: common languages first, extra repository languages after."""
        infos = resolver.get_available_languages({"fr": 12, "sv": 3})
        codes = [info.code for info in infos]

        assert codes == list(COMMON_LANGUAGES) + ["sv"]
        by_code = {info.code: info for info in infos}
        assert by_code["fr"].available and by_code["fr"].command_count == 12
        assert by_code["en"].available
        assert not by_code["de"].available

    def test_language_status(self, resolver):
        """Happy: repository languages sorted by command count."""
        status = resolver.get_language_status({"fr": 3, "en": 10, "de": 0}, override="fr")

        assert status.current == "fr"
        assert [info.code for info in status.repository] == ["en", "fr"]
        common_codes = [info.code for info in status.common]
        assert "en" not in common_codes and "de" in common_codes
