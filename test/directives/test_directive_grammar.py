"""Tests for the inline directive grammar."""

from ndraft.directives import has_directives, parse_directives, parse_theme_payload, with_default_unit


class TestThemeAndActions:
    """Tests for theme and action tokens."""

    def test_theme_prose_and_action(self):
        """Test a theme token, prose and an action token in one response."""
        result = parse_directives(
            "!theme:Gold,#1a1a1a,#2a2a2a,#ffd700,#ffd700,#b8860b!Hello!action:view:grid!"
        )

        assert result.clean_text == "Hello"
        assert result.theme_update is not None
        assert result.theme_update.name == "Gold"
        assert result.theme_update.bg == "#1a1a1a"
        assert result.theme_update.card_bg == "#2a2a2a"
        assert result.theme_update.text == "#ffd700"
        assert result.theme_update.border == "#ffd700"
        assert result.theme_update.primary == "#b8860b"
        assert result.actions == ["view:grid"]

    def test_last_theme_wins(self):
        """Test only the last theme token is kept."""
        result = parse_directives("!theme:First,#000!text!theme:Second,#fff!")

        assert result.theme_update.name == "Second"
        assert result.theme_update.bg == "#fff"
        assert result.clean_text == "text"

    def test_partial_theme_leaves_missing_fields_unset(self):
        """Test absent theme fields stay None."""
        update = parse_theme_payload("Ocean,#001")

        assert update.name == "Ocean"
        assert update.bg == "#001"
        assert update.card_bg is None
        assert update.primary is None
        assert update.provided() == {"name": "Ocean", "bg": "#001"}

    def test_blank_theme_fields_are_skipped(self):
        """Test blank positional fields are not applied."""
        update = parse_theme_payload("Mist, , ,#333")

        assert update.provided() == {"name": "Mist", "text": "#333"}

    def test_duplicate_actions_kept_in_order(self):
        """Test repeated identical actions are each recorded."""
        result = parse_directives("!action:clear!one!action:merge!two!action:clear!")

        assert result.actions == ["clear", "merge", "clear"]
        assert result.clean_text == "onetwo"

    def test_no_theme_token(self):
        """Test a response without a theme token."""
        result = parse_directives("Just prose.")

        assert result.theme_update is None
        assert result.actions == []
        assert result.style_update.is_empty()
        assert result.clean_text == "Just prose."


class TestStyleTokens:
    """Tests for per-card style tokens."""

    def test_color_tokens(self):
        """Test color tokens map to style keys."""
        result = parse_directives("!bg:#222!!text:white!!border:red!Body")

        assert result.style_update.background_color == "#222"
        assert result.style_update.color == "white"
        assert result.style_update.border_color == "red"
        assert result.clean_text == "Body"

    def test_bare_lengths_get_px(self):
        """Test unitless lengths get a px suffix."""
        result = parse_directives("!pad:12!!radius:4!!font:18!x")

        assert result.style_update.padding == "12px"
        assert result.style_update.border_radius == "4px"
        assert result.style_update.font_size == "18px"

    def test_lengths_with_units_unchanged(self):
        """Test lengths that carry a unit are kept."""
        assert with_default_unit("1.5em") == "1.5em"
        assert with_default_unit("50%") == "50%"
        assert with_default_unit("2rem") == "2rem"
        assert with_default_unit("10") == "10px"

    def test_flags(self):
        """Test bold and italic flags."""
        result = parse_directives("!bold!!italic!Loud")

        assert result.style_update.font_weight == "bold"
        assert result.style_update.font_style == "italic"
        assert result.clean_text == "Loud"

    def test_custom_css(self):
        """Test the css token carries a raw fragment."""
        result = parse_directives("!css:letter-spacing: 2px!x")

        assert result.style_update.custom_css == "letter-spacing: 2px"

    def test_later_style_token_wins(self):
        """Test a later token for the same key overrides an earlier one."""
        result = parse_directives("!bg:red!x!bg:blue!")

        assert result.style_update.background_color == "blue"

    def test_keywords_are_case_insensitive(self):
        """Test keywords match regardless of case."""
        result = parse_directives("!BG:red!!Bold!x")

        assert result.style_update.background_color == "red"
        assert result.style_update.font_weight == "bold"

    def test_blank_payload_removed_without_effect(self):
        """Test a token with a blank payload is stripped but not applied."""
        result = parse_directives("!bg: !Hi")

        assert result.clean_text == "Hi"
        assert result.style_update.is_empty()


class TestCleanText:
    """Tests for clean text extraction."""

    def test_unknown_tokens_preserved(self):
        """Test unrecognized bang-delimited text is left alone."""
        result = parse_directives("!foo:bar! stays")

        assert result.clean_text == "!foo:bar! stays"
        assert result.style_update.is_empty()

    def test_exclamations_in_prose_preserved(self):
        """Test ordinary exclamation marks survive."""
        result = parse_directives("Wow! That is great!")

        assert result.clean_text == "Wow! That is great!"

    def test_result_is_trimmed(self):
        """Test surrounding whitespace is removed."""
        result = parse_directives("!bold!\n\n  Text  \n!action:clear!\n")

        assert result.clean_text == "Text"

    def test_reparse_is_noop(self):
        """Test parsing clean text again changes nothing."""
        source = "!theme:Gold,#111!Intro !bg:red! middle !action:clear! end !bold!"
        first = parse_directives(source)
        second = parse_directives(first.clean_text)

        assert second.clean_text == first.clean_text
        assert second.actions == []
        assert second.theme_update is None
        assert second.style_update.is_empty()

    def test_same_input_same_result(self):
        """Test parsing is deterministic."""
        source = "!bg:red!Hello!action:view:list!"

        assert parse_directives(source) == parse_directives(source)

    def test_empty_input(self):
        """Test empty and None input."""
        assert parse_directives("").clean_text == ""
        assert parse_directives(None).clean_text == ""

    def test_has_directives(self):
        """Test the quick directive check."""
        assert has_directives("a !bold! b") is True
        assert has_directives("a ! b") is False
        assert has_directives("") is False
