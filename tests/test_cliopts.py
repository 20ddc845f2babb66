import pytest

from ggmlfmt.cliopts import (
    ContainerChoice,
    QuantizationTarget,
    autodetect_num_threads,
    format_prompt_tokens,
    num_threads,
    rope_overrides,
    utf8_or_array,
)
from ggmlfmt.saver import SaveContainerType
from ggmlfmt.types import ElementType


@pytest.mark.parametrize(
    "value, expected",
    [
        ("q4_0", ElementType.Q4_0),
        ("q4_1", ElementType.Q4_1),
        ("q5_0", ElementType.Q5_0),
        ("q5_1", ElementType.Q5_1),
        ("q8_0", ElementType.Q8_0),
    ],
)
def test_quantization_target_maps_to_same_named_element_type(value, expected):
    target = QuantizationTarget(value)
    element_type = target.to_element_type()
    assert element_type is expected
    assert str(element_type) == value


def test_quantization_target_from_value():
    assert QuantizationTarget("q5_1").to_element_type() is ElementType.Q5_1


def test_container_choice_display_and_mapping():
    assert str(ContainerChoice.GGJT_V3) == "ggjt-v3"
    assert str(ContainerChoice.GGML) == "ggml"
    assert ContainerChoice.GGML.to_save_container_type() is SaveContainerType.GGML
    assert ContainerChoice.GGJT_V3.to_save_container_type() is SaveContainerType.GGJT_V3


def test_rope_overrides_none_when_unset():
    assert rope_overrides(None, None) is None


def test_rope_overrides_fills_defaults():
    only_base = rope_overrides(20000, None)
    assert only_base.frequency_base == 20000
    assert only_base.frequency_scale == 1.0
    only_scale = rope_overrides(None, 0.5)
    assert only_scale.frequency_base == 10_000
    assert only_scale.frequency_scale == 0.5


def test_num_threads_requested_wins():
    assert num_threads(7) == 7


def test_num_threads_autodetects():
    detected = num_threads(None)
    assert detected == autodetect_num_threads()
    assert detected >= 1


def test_utf8_or_array_text():
    assert utf8_or_array("héllo".encode("utf-8")) == "héllo"


def test_utf8_or_array_invalid_bytes():
    assert utf8_or_array(b"\xff\x00") == "[255, 0]"


def test_format_prompt_tokens():
    ids, labelled = format_prompt_tokens([("Hello", 1), (" world", 2)])
    assert ids.split(", ") == ["1", "2"]
    assert labelled == '"Hello":1, " world":2'


def test_format_prompt_tokens_escapes():
    _, labelled = format_prompt_tokens([('a"\n', 5)])
    assert labelled == '"a\\"\\n":5'


def test_format_prompt_tokens_empty():
    assert format_prompt_tokens([]) == ("", "")