import datetime
import unittest

from changelog_generator.changelog.errors import (
    ChangelogError,
    TemplateError,
    TemplateMarkerError,
    TemplateTokenMissingError,
)
from changelog_generator.changelog.template import (
    LINE_MARKER,
    SECTION_MARKER,
    TEXT,
    TemplateRenderer,
    format_date,
    parse_template,
    render_sections,
    render_template,
    tokenize,
)
from changelog_generator.config.loader import DEFAULT_TEMPLATE


DAY = datetime.date(2024, 3, 5)
CATEGORIES = {"feat": "Features", "fix": "Bug Fixes"}


class TestTokenize(unittest.TestCase):
    def test_splits_text_and_markers(self) -> None:
        text = "a{{.SECTION}}b{{.SECTION}}{{.COMMITS}}c{{.COMMITS}}"
        kinds = [token.kind for token in tokenize(text)]
        self.assertEqual(
            kinds,
            [TEXT, SECTION_MARKER, TEXT, SECTION_MARKER, LINE_MARKER, TEXT, LINE_MARKER],
        )

    def test_tokens_cover_the_whole_text(self) -> None:
        text = "## x\n{{.SECTION}}### $title{{.SECTION}}\n{{.COMMITS}}- $commit{{.COMMITS}}\n"
        tokens = tokenize(text)
        self.assertEqual("".join(text[t.start : t.end] for t in tokens), text)

    def test_plain_text(self) -> None:
        tokens = tokenize("no markers")
        self.assertEqual(len(tokens), 1)
        self.assertEqual(tokens[0].kind, TEXT)

    def test_empty_text(self) -> None:
        self.assertEqual(tokenize(""), [])


class TestParseTemplate(unittest.TestCase):
    def test_extracts_fragments_and_span(self) -> None:
        parsed = parse_template(DEFAULT_TEMPLATE)
        self.assertEqual(parsed.section_fragment, "### $title")
        self.assertEqual(parsed.line_fragment, "- $commit")
        self.assertEqual(parsed.head, "## {{versionName}} ({{date}})\n\n")
        self.assertEqual(parsed.tail, "\n")

    def test_missing_marker(self) -> None:
        with self.assertRaises(TemplateMarkerError):
            parse_template("{{.SECTION}}### $title{{.SECTION}}\n- $commit\n")

    def test_unpaired_marker(self) -> None:
        with self.assertRaises(TemplateMarkerError):
            parse_template("{{.SECTION}}### $title\n{{.COMMITS}}- $commit{{.COMMITS}}")

    def test_more_than_two_occurrences(self) -> None:
        text = "{{.SECTION}}a{{.SECTION}}{{.COMMITS}}b{{.COMMITS}}{{.COMMITS}}"
        with self.assertRaises(TemplateMarkerError) as ctx:
            parse_template(text)
        self.assertIn("found 3", str(ctx.exception))

    def test_line_fragment_inside_section_fragment(self) -> None:
        text = "{{.SECTION}}### $title\n{{.COMMITS}}- $commit{{.COMMITS}}{{.SECTION}}"
        with self.assertRaises(TemplateMarkerError):
            parse_template(text)

    def test_line_fragment_before_section_fragment(self) -> None:
        text = "{{.COMMITS}}- $commit{{.COMMITS}}\n{{.SECTION}}### $title{{.SECTION}}"
        with self.assertRaises(TemplateMarkerError):
            parse_template(text)

    def test_marker_errors_are_template_errors(self) -> None:
        self.assertTrue(issubclass(TemplateMarkerError, TemplateError))
        self.assertTrue(issubclass(TemplateTokenMissingError, TemplateError))
        self.assertTrue(issubclass(TemplateError, ChangelogError))


class TestFormatDate(unittest.TestCase):
    def test_no_zero_padding(self) -> None:
        self.assertEqual(format_date(datetime.date(2024, 3, 5)), "3/5/2024")
        self.assertEqual(format_date(datetime.date(2023, 12, 31)), "12/31/2023")


class TestRenderSections(unittest.TestCase):
    def test_renders_each_category_and_line(self) -> None:
        rendered = render_sections(
            "### $title",
            "- $commit",
            {"fix": ["A", "C"], "feat": ["B"]},
            CATEGORIES,
        )
        self.assertEqual(rendered, "### Bug Fixes\n- A\n- C\n\n### Features\n- B")

    def test_empty_group(self) -> None:
        self.assertEqual(render_sections("### $title", "- $commit", {}, CATEGORIES), "")

    def test_only_first_placeholder_is_replaced(self) -> None:
        rendered = render_sections("$title / $title", "- $commit", {"feat": ["B"]}, CATEGORIES)
        self.assertEqual(rendered, "Features / $title\n- B")

    def test_group_without_category(self) -> None:
        with self.assertRaises(ChangelogError):
            render_sections("### $title", "- $commit", {"chore": ["x"]}, CATEGORIES)


class TestTemplateRenderer(unittest.TestCase):
    def test_renders_default_template(self) -> None:
        result = render_template(
            DEFAULT_TEMPLATE,
            "1.0.0",
            {"feat": ["Add search"], "fix": ["**core:** Null check"]},
            CATEGORIES,
            today=DAY,
        )
        self.assertEqual(
            result,
            "## 1.0.0 (3/5/2024)\n\n"
            "### Features\n- Add search\n\n"
            "### Bug Fixes\n- **core:** Null check\n",
        )

    def test_empty_group_keeps_header(self) -> None:
        result = render_template(DEFAULT_TEMPLATE, "1.0.0", {}, CATEGORIES, today=DAY)
        self.assertEqual(result, "## 1.0.0 (3/5/2024)\n\n\n")

    def test_text_around_the_span_is_kept(self) -> None:
        template = (
            "# Release {{versionName}}\nDate: {{date}}\n\n"
            "{{.SECTION}}#### $title{{.SECTION}}\n"
            "{{.COMMITS}}* $commit{{.COMMITS}}\n"
            "\n---\n"
        )
        result = render_template(template, "2.4.0", {"fix": ["Null check"]}, CATEGORIES, today=DAY)
        self.assertEqual(
            result,
            "# Release 2.4.0\nDate: 3/5/2024\n\n#### Bug Fixes\n* Null check\n\n---\n",
        )

    def test_tokens_inside_fragments_are_substituted(self) -> None:
        template = "{{date}}\n{{.SECTION}}$title ({{versionName}}){{.SECTION}}\n{{.COMMITS}}- $commit{{.COMMITS}}"
        result = render_template(template, "9.9", {"feat": ["X"]}, CATEGORIES, today=DAY)
        self.assertEqual(result, "3/5/2024\nFeatures (9.9)\n- X")

    def test_defaults_to_today(self) -> None:
        result = render_template(DEFAULT_TEMPLATE, "1.0.0", {}, CATEGORIES)
        self.assertIn(format_date(datetime.date.today()), result)

    def test_missing_date_token(self) -> None:
        template = DEFAULT_TEMPLATE.replace("{{date}}", "today")
        with self.assertRaises(TemplateTokenMissingError) as ctx:
            TemplateRenderer(template)
        self.assertIn("{{date}}", str(ctx.exception))

    def test_missing_version_token(self) -> None:
        template = DEFAULT_TEMPLATE.replace("{{versionName}}", "v")
        with self.assertRaises(TemplateTokenMissingError):
            TemplateRenderer(template)

    def test_malformed_markers_fail_on_construction(self) -> None:
        with self.assertRaises(TemplateMarkerError):
            TemplateRenderer("{{versionName}} {{date}}\n{{.SECTION}}$title\n")

    def test_renderer_is_reusable(self) -> None:
        renderer = TemplateRenderer(DEFAULT_TEMPLATE)
        first = renderer.render("1.0.0", {"feat": ["A"]}, CATEGORIES, today=DAY)
        second = renderer.render("1.1.0", {"fix": ["B"]}, CATEGORIES, today=DAY)
        self.assertEqual(first, "## 1.0.0 (3/5/2024)\n\n### Features\n- A\n")
        self.assertEqual(second, "## 1.1.0 (3/5/2024)\n\n### Bug Fixes\n- B\n")


if __name__ == "__main__":
    unittest.main()
