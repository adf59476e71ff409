"""Tests for versioned prompt templates."""

import json

import pytest

from adjusterhub.prompts.manager import PromptManager


@pytest.fixture()
def prompt_dir(tmp_path):
    greeting = tmp_path / "greeting"
    greeting.mkdir()
    (greeting / "v1.txt").write_text("Hello {name}.")
    (greeting / "v2.txt").write_text("Hi {name}, you are a {role}. Output {{\"ok\": true}}")
    (greeting / "v10.txt").write_text("Newest {name}")
    (greeting / "metadata.json").write_text(json.dumps({"v2": {"author": "ops"}}))
    return tmp_path


class TestPromptManager:
    def test_versions_sort_numerically(self, prompt_dir):
        assert PromptManager(prompt_dir).list_versions("greeting") == ["v1", "v2", "v10"]

    def test_latest(self, prompt_dir):
        assert PromptManager(prompt_dir).get("greeting") == "Newest {name}"

    def test_render_fills_and_unescapes(self, prompt_dir):
        text = PromptManager(prompt_dir).render("greeting", "v2", name="Jane", role="ADJUSTER")
        assert text == 'Hi Jane, you are a ADJUSTER. Output {"ok": true}'

    def test_unknown_placeholders_are_left_visible(self, prompt_dir):
        assert PromptManager(prompt_dir).render("greeting", "v1") == "Hello {name}."

    def test_metadata(self, prompt_dir):
        manager = PromptManager(prompt_dir)
        assert manager.get_metadata("greeting", "v2") == {"author": "ops"}
        assert manager.get_metadata("greeting", "v1") == {}

    def test_missing_prompt(self, prompt_dir):
        with pytest.raises(FileNotFoundError):
            PromptManager(prompt_dir).get("nope")

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PromptManager(tmp_path / "absent")

    def test_bundled_assistant_prompt_renders(self):
        text = PromptManager().render(
            "assistant_system",
            name="Jane Doe",
            role="ADJUSTER",
            specialties="Auto",
            active_claims=2,
            recent_claims="CLM-2026-0001 (ASSIGNED)",
            pending_earnings="$1,250.00",
        )
        assert "Jane Doe" in text
        assert "CLM-2026-0001" in text
        assert "{name}" not in text
