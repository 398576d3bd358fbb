from unittest.mock import MagicMock

from imagekit_web.url.models import Overlay, TransformationStep
from imagekit_web.url.transformation import (
    build_transformation_string,
    overlay_to_dict,
    step_to_dict,
)


def _tr(*steps) -> str:
    return build_transformation_string([TransformationStep.from_mapping(s) for s in steps])


class TestStepToDict:
    def test_keeps_pair_order(self):
        step = TransformationStep.of(("width", 640), ("crop", "at_max"))
        assert list(step_to_dict(step).items()) == [("width", 640), ("crop", "at_max")]

    def test_int_lists_become_lists(self):
        step = TransformationStep.from_mapping({"streaming_resolutions": [240, 360]})
        assert step_to_dict(step) == {"streaming_resolutions": [240, 360]}

    def test_overlay_becomes_layer_dict(self):
        step = TransformationStep.from_mapping({
            "overlay": {
                "type": "text",
                "text": "Hi",
                "position": {"x": 10},
                "transformation": [{"font_size": 20}],
            }
        })
        assert step_to_dict(step) == {
            "overlay": {
                "type": "text",
                "encoding": "auto",
                "text": "Hi",
                "position": {"x": 10},
                "transformation": [{"font_size": 20}],
            }
        }

    def test_solid_color_uses_camel_case_type(self):
        overlay = Overlay(type="solid_color", color="FF0000")
        assert overlay_to_dict(overlay) == {"type": "solidColor", "encoding": "auto", "color": "FF0000"}


class TestBuildTransformationString:
    def test_single_step_sorted(self):
        assert _tr({"width": 400, "height": 300}) == "h-300,w-400"

    def test_chain_keeps_step_order(self):
        assert _tr({"width": 400, "height": 300}, {"rotation": 90}) == "h-300,w-400:rt-90"
        assert _tr({"rotation": 90}, {"width": 400}) == "rt-90:w-400"

    def test_explicit_order_step(self):
        step = TransformationStep.of(("width", 640), ("crop", "at_max"))
        assert build_transformation_string([step]) == "w-640,c-at_max"

    def test_empty_chain(self):
        assert build_transformation_string([]) == ""

    def test_unknown_key_verbatim(self):
        assert _tr({"foo": "bar"}) == "foo-bar"

    def test_flag_effect(self):
        assert _tr({"grayscale": True}) == "e-grayscale"
        assert _tr({"grayscale": "-"}) == "e-grayscale"

    def test_disabled_flag_effect_skips_step(self):
        assert _tr({"grayscale": False}, {"width": 100}) == "w-100"

    def test_optional_argument_effect(self):
        assert _tr({"sharpen": True}) == "e-sharpen"
        assert _tr({"sharpen": 10}) == "e-sharpen-10"
        assert _tr({"shadow": "bl-15_st-40"}) == "e-shadow-bl-15_st-40"

    def test_plain_boolean(self):
        assert _tr({"trim": True}) == "t-true"
        assert _tr({"lossless": False}, {"width": 100}) == "w-100"

    def test_raw(self):
        assert _tr({"raw": "l-text,i-Hi,l-end"}) == "l-text,i-Hi,l-end"

    def test_slashes_replaced(self):
        assert _tr({"default_image": "/folder/fallback.jpg"}) == "di-folder@@fallback.jpg"
        assert _tr({"font_family": "fonts/Roboto.ttf"}) == "ff-fonts@@Roboto.ttf"

    def test_streaming_resolutions(self):
        assert _tr({"streaming_resolutions": [240, 360, 480]}) == "sr-240_360_480"

    def test_float_value(self):
        assert _tr({"aspect_ratio": "4-3", "dpr": 2.5}) == "ar-4-3,dpr-2.5"

    def test_serialized_by_injected_client(self):
        client = MagicMock()
        client.helper.build_transformation_string.return_value = "w-1"
        step = TransformationStep.of(("width", 1))

        assert build_transformation_string([step], client=client) == "w-1"
        client.helper.build_transformation_string.assert_called_once_with([{"width": 1}])


class TestOverlays:
    def test_text_overlay_with_nested_chain(self):
        result = _tr({
            "overlay": {
                "type": "text",
                "text": "Hello World",
                "transformation": [{"font_size": 50, "font_color": "FFFFFF"}],
            }
        })
        assert result == "l-text,i-Hello%20World,co-FFFFFF,fs-50,l-end"

    def test_text_overlay_with_special_chars_is_base64(self):
        assert _tr({"overlay": {"type": "text", "text": "Hi!"}}) == "l-text,ie-SGkh,l-end"

    def test_plain_encoding_forced(self):
        result = _tr({"overlay": {"type": "text", "text": "Hi!", "encoding": "plain"}})
        assert result == "l-text,i-Hi%21,l-end"

    def test_image_overlay_position(self):
        result = _tr({
            "overlay": {"type": "image", "input": "/logo/ik.png", "position": {"x": 10, "y": 20}}
        })
        assert result == "l-image,i-logo@@ik.png,lx-10,ly-20,l-end"

    def test_video_overlay_timing(self):
        result = _tr({
            "overlay": {"type": "video", "input": "clip.mp4", "timing": {"start": 2, "duration": 5}}
        })
        assert result == "l-video,i-clip.mp4,lso-2,ldu-5,l-end"

    def test_subtitle_overlay(self):
        result = _tr({"overlay": {"type": "subtitle", "input": "subs/en.srt"}})
        assert result == "l-subtitles,i-subs@@en.srt,l-end"

    def test_solid_color_overlay(self):
        result = _tr({"overlay": {"type": "solid_color", "color": "FF0000"}})
        assert result == "l-image,i-ik_canvas,bg-FF0000,l-end"

    def test_overlay_missing_input_is_dropped(self):
        assert _tr({"overlay": {"type": "text"}, "width": 300}) == "w-300"

    def test_overlay_sorted_with_other_params(self):
        result = _tr({"width": 300, "overlay": {"type": "text", "text": "Hi"}})
        assert result == "l-text,i-Hi,l-end,w-300"
