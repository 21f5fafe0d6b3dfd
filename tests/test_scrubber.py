"""Tests for metadata scrubbing of raw message text."""

from cchistory.scrubber import clean_xml_tags, collapse_blank_lines, scrub_metadata


def test_removes_system_reminder_and_content() -> None:
    text = "Before\n<system-reminder>\nsecret context\n</system-reminder>\nAfter"

    result = scrub_metadata(text)

    assert "system-reminder" not in result
    assert "secret context" not in result
    assert result.startswith("Before")
    assert result.endswith("After")


def test_removed_tag_leaves_at_most_one_blank_line() -> None:
    text = "Before\n\n<user-prompt-submit-hook>hook output</user-prompt-submit-hook>\n\nAfter"

    result = scrub_metadata(text)

    assert result == "Before\n\nAfter"


def test_removes_tags_with_attributes() -> None:
    text = 'Keep <system-reminder priority="high">drop me</system-reminder>this'

    assert scrub_metadata(text) == "Keep this"


def test_removes_self_closing_tags_without_eating_text() -> None:
    text = "One <user-prompt-submit-hook/> two <system-reminder /> three"

    result = scrub_metadata(text)

    assert "hook" not in result
    assert "reminder" not in result
    assert "two" in result
    assert "three" in result


def test_command_name_becomes_callout() -> None:
    result = scrub_metadata("<command-name>/compact</command-name>")

    assert result == "> 💡 **Command**: `/compact`"


def test_command_message_becomes_status() -> None:
    result = scrub_metadata("<command-message>compact is running…</command-message>")

    assert "> ℹ️ **Status**: compact is running…" in result


def test_command_args_only_when_non_blank() -> None:
    with_args = scrub_metadata("<command-args>--force now</command-args>")
    blank_args = scrub_metadata("x<command-args>   </command-args>")

    assert "> 📝 **Arguments**: `--force now`" in with_args
    assert "Arguments" not in blank_args
    assert blank_args == "x"


def test_stdout_block_is_fenced() -> None:
    result = scrub_metadata("<local-command-stdout>done\nok</local-command-stdout>")

    assert "> 📤 **Output**:" in result
    assert "```\ndone\nok\n```" in result


def test_stderr_block_label() -> None:
    result = scrub_metadata("<command-stderr>boom</command-stderr>")

    assert "> ⚠️ **Error Output**:" in result
    assert "```\nboom\n```" in result


def test_long_output_block_is_previewed() -> None:
    body = "\n".join(f"line {i}" for i in range(1, 13))

    result = scrub_metadata(f"<local-command-stderr>{body}</local-command-stderr>")

    assert "line 5" in result
    assert "line 6" not in result
    assert "(7 more lines)" in result


def test_ten_line_output_is_shown_in_full() -> None:
    body = "\n".join(f"line {i}" for i in range(1, 11))

    result = scrub_metadata(f"<local-command-stdout>{body}</local-command-stdout>")

    assert "line 10" in result
    assert "more lines" not in result


def test_blank_output_block_shows_placeholder() -> None:
    result = scrub_metadata("<local-command-stdout>  \n </local-command-stdout>")

    assert "```\n(empty)\n```" in result


def test_plain_text_passes_through() -> None:
    text = "Just a normal message.\n\nWith two paragraphs."

    assert scrub_metadata(text) == text
    assert scrub_metadata(scrub_metadata(text)) == text


def test_collapse_blank_lines() -> None:
    assert collapse_blank_lines("  a\n\n\n\n\nb\n  \n \nc  ") == "a\n\nb\n\nc"


def test_empty_input() -> None:
    assert scrub_metadata("") == ""


def test_clean_xml_tags_for_preview() -> None:
    text = "<command-name>/init</command-name>\n<b>Hello</b>   there\nfriend"

    assert clean_xml_tags(text) == "Hello there friend"
