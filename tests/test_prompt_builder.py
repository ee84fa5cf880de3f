"""Tests for the grounding prompts."""

from conftest import make_result

from server.core.PromptBuilder import ANSWER_SYSTEM_PROMPT, build_answer_prompt, format_context_chunk
from shared.models.knowledge import TruthPriority


def test_system_prompt_states_the_contract():
    for field in ("answer", "confidence", "key_points", "gaps", "sources_used"):
        assert f'"{field}"' in ANSWER_SYSTEM_PROMPT
    assert "[Source: filename, section]" in ANSWER_SYSTEM_PROMPT
    assert "outside knowledge" in ANSWER_SYSTEM_PROMPT
    assert "conflict" in ANSWER_SYSTEM_PROMPT


def test_context_chunk_header():
    result = make_result(3, 0.756, truth_priority=TruthPriority.AUTHORITATIVE, content="Refunds within 30 days.")

    block = format_context_chunk(3, result)

    assert block.startswith("[3] File: file-3.pdf, Section: Section 3 [authoritative priority] (76% match)")
    assert '"""\nRefunds within 30 days.\n"""' in block


def test_context_chunk_without_section_or_priority():
    result = make_result(0, 0.5, section_title=None, truth_priority=None)

    block = format_context_chunk(0, result)

    assert block.startswith("[0] File: file-0.pdf, Section: document (50% match)")
    assert "priority]" not in block


def test_user_prompt_numbers_chunks_in_order_and_ends_with_question():
    results = [make_result(0, 0.81), make_result(1, 0.76), make_result(2, 0.65)]

    prompt = build_answer_prompt("What is the refund policy?", results)

    positions = [prompt.index(f"[{i}] File: file-{i}.pdf") for i in range(3)]
    assert positions == sorted(positions)
    assert prompt.index("## Question") > positions[-1]
    assert "What is the refund policy?" in prompt
    assert "JSON object" in prompt.split("## Instructions")[1]
