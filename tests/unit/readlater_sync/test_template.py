"""Tests for readlater_sync.template module."""

from datetime import datetime, timezone

from readlater_sync.models import ArticleRecord
from readlater_sync.template import DEFAULT_TEMPLATE, render, render_batch

ADDED = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


def make_record(**overrides) -> ArticleRecord:
    fields = {
        "url": "https://www.wired.com/story/a",
        "source": "Wired.com",
        "added_date": ADDED,
        "title": "A Story",
    }
    fields.update(overrides)
    return ArticleRecord(**fields)


class TestRender:
    def test_placeholders(self) -> None:
        text = render("{{title}} ({{source}}) {{url}}", make_record())
        assert text == "A Story (Wired.com) https://www.wired.com/story/a"

    def test_missing_author_falls_back(self) -> None:
        assert render("by {{author}}", make_record()) == "by Unknown"

    def test_missing_optional_field_renders_empty(self) -> None:
        assert render("[{{date}}]", make_record()) == "[]"

    def test_unknown_placeholder_left_as_is(self) -> None:
        assert render("{{title}} {{mood}}", make_record()) == "A Story {{mood}}"

    def test_conditional_kept_when_field_present(self) -> None:
        record = make_record(excerpt="Short summary")
        assert render("{{#if excerpt}}> {{excerpt}}{{/if}}", record) == "> Short summary"

    def test_conditional_removed_when_field_missing(self) -> None:
        assert render("A{{#if excerpt}}> {{excerpt}}{{/if}}B", make_record()) == "AB"

    def test_conditional_on_unknown_field_removed(self) -> None:
        assert render("A{{#if mood}}x{{/if}}B", make_record()) == "AB"

    def test_conditional_with_trailing_text(self) -> None:
        template = "{{#if excerpt}}E:{{excerpt}} {{/if}}Y"
        assert render(template, make_record()) == "Y"
        assert render(template, make_record(excerpt="hi")) == "E:hi Y"

    def test_rendering_is_repeatable(self) -> None:
        record = make_record(excerpt="hi", tags=("a",))
        assert render(DEFAULT_TEMPLATE, record) == render(DEFAULT_TEMPLATE, record)

    def test_tags_joined(self) -> None:
        record = make_record(tags=("ai", "policy"))
        assert render("{{tags}}", record) == "ai, policy"

    def test_added_date(self) -> None:
        assert render("{{added}}", make_record()) == "2024-03-01"

    def test_default_template(self) -> None:
        record = make_record(author="Jane Doe", publication_date="2024-02-28", excerpt="Summary")
        text = render(DEFAULT_TEMPLATE, record)

        assert text.startswith("## A Story\n")
        assert "- **Author:** Jane Doe" in text
        assert "- **Excerpt:** Summary" in text
        assert "Tags" not in text
        assert text.rstrip().endswith("---")


class TestRenderBatch:
    def test_blocks_joined_with_blank_line(self) -> None:
        records = [make_record(title="One"), make_record(title="Two")]
        assert render_batch("## {{title}}\n", records) == "## One\n\n## Two"

    def test_empty_batch(self) -> None:
        assert render_batch(DEFAULT_TEMPLATE, []) == ""
