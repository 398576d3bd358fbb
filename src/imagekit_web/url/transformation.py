"""ImageKit transformation strings, serialized by the imagekitio SDK.

The ``tr`` grammar (short codes, effect flags, overlay layers) belongs to the
SDK helper. This module turns the typed TransformationStep and Overlay values
into the plain dicts the helper takes, e.g.
``[{"height": 300, "width": 400}, {"rotation": 90}]`` -> ``h-300,w-400:rt-90``.
"""

from functools import lru_cache

from imagekitio import ImageKit

from imagekit_web.url.models import Overlay, TransformationStep

CHAIN_DELIMITER = ":"
TRANSFORMATION_PARAMETER = "tr"


@lru_cache(maxsize=16)
def imagekit_client(private_key: str = "") -> ImageKit:
    """Return a shared SDK client; URL helpers never touch the network."""
    return ImageKit(private_key=private_key)


def overlay_to_dict(overlay: Overlay) -> dict:
    layer = {
        "type": "solidColor" if overlay.type == "solid_color" else overlay.type,
        "encoding": overlay.encoding,
    }
    for name in ("text", "input", "color"):
        value = getattr(overlay, name)
        if value is not None:
            layer[name] = value
    position = overlay.position.model_dump(exclude_none=True)
    if position:
        layer["position"] = position
    timing = overlay.timing.model_dump(exclude_none=True)
    if timing:
        layer["timing"] = timing
    if overlay.transformation:
        layer["transformation"] = [step_to_dict(step) for step in overlay.transformation]
    return layer


def step_to_dict(step: TransformationStep) -> dict:
    """Convert one step into the SDK's dict form, keeping pair order."""
    converted = {}
    for name, value in step.params:
        if isinstance(value, Overlay):
            value = overlay_to_dict(value)
        elif isinstance(value, tuple):
            value = list(value)
        converted[name] = value
    return converted


def build_transformation_string(steps, client: ImageKit | None = None) -> str:
    """Serialize a chain of steps, joining non-empty steps with ``:``."""
    client = client or imagekit_client()
    return client.helper.build_transformation_string([step_to_dict(step) for step in steps])
