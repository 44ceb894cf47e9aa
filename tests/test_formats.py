import pytest

from lerkit.formats import (
    Format,
    ImageAspect,
    ImageType,
    ImageUsage,
    SampleCount,
    SamplerAddressMode,
    TextureDesc,
    VkFormat,
    VkSamplerAddressMode,
    convert_format,
    convert_sampler_address_mode,
    guess_image_aspect_flags,
    has_depth,
    pick_image_sample,
    pick_image_type,
    pick_image_usage,
    reverse_format,
)

_ALIASES = {Format.X24G8_UINT: Format.D24S8, Format.X32G8_UINT: Format.D32S8}


def test_convert_known_formats():
    assert convert_format(Format.RGBA8_UNORM) is VkFormat.R8G8B8A8_UNORM
    assert convert_format(Format.BGRA8_UNORM) is VkFormat.B8G8R8A8_UNORM
    assert convert_format(Format.UNKNOWN) is VkFormat.UNDEFINED
    assert convert_format(Format.BC7_UNORM_SRGB) is VkFormat.BC7_SRGB_BLOCK


def test_every_format_is_mapped():
    mapped = {convert_format(fmt) for fmt in Format}
    assert len(mapped) == len(Format) - len(_ALIASES)


@pytest.mark.parametrize("fmt", list(Format))
def test_round_trip(fmt):
    assert reverse_format(convert_format(fmt)) is _ALIASES.get(fmt, fmt)


def test_aliases_share_vulkan_format():
    assert convert_format(Format.X24G8_UINT) is convert_format(Format.D24S8)
    assert reverse_format(VkFormat.D24_UNORM_S8_UINT) is Format.D24S8


def test_reverse_unmapped_is_unknown():
    assert reverse_format(VkFormat.S8_UINT) is Format.UNKNOWN
    assert reverse_format(999999) is Format.UNKNOWN


def test_convert_rejects_unknown_value():
    with pytest.raises(ValueError):
        convert_format(len(Format))


@pytest.mark.parametrize(
    "mode, expected",
    [
        (SamplerAddressMode.CLAMP_TO_EDGE, VkSamplerAddressMode.CLAMP_TO_EDGE),
        (SamplerAddressMode.REPEAT, VkSamplerAddressMode.REPEAT),
        (SamplerAddressMode.CLAMP_TO_BORDER, VkSamplerAddressMode.CLAMP_TO_BORDER),
        (SamplerAddressMode.MIRRORED_REPEAT, VkSamplerAddressMode.MIRRORED_REPEAT),
        (SamplerAddressMode.MIRROR_CLAMP_TO_EDGE, VkSamplerAddressMode.MIRROR_CLAMP_TO_EDGE),
    ],
)
def test_sampler_address_mode(mode, expected):
    assert convert_sampler_address_mode(mode) is expected


def test_sampler_address_mode_fallback():
    assert convert_sampler_address_mode("bogus") is VkSamplerAddressMode.REPEAT


@pytest.mark.parametrize(
    "samples, expected",
    [(1, SampleCount.COUNT_1), (2, SampleCount.COUNT_2), (4, SampleCount.COUNT_4),
     (8, SampleCount.COUNT_8), (3, SampleCount.COUNT_1), (16, SampleCount.COUNT_1)],
)
def test_pick_image_sample(samples, expected):
    assert pick_image_sample(samples) is expected


@pytest.mark.parametrize(
    "dimension, expected",
    [(1, ImageType.TYPE_1D), (2, ImageType.TYPE_2D), (3, ImageType.TYPE_3D),
     (0, ImageType.TYPE_1D), (7, ImageType.TYPE_1D)],
)
def test_pick_image_type(dimension, expected):
    assert pick_image_type(dimension) is expected


def test_aspect_flags():
    assert guess_image_aspect_flags(VkFormat.D32_SFLOAT) == ImageAspect.DEPTH
    assert guess_image_aspect_flags(VkFormat.S8_UINT) == ImageAspect.STENCIL
    assert guess_image_aspect_flags(VkFormat.D24_UNORM_S8_UINT, False) == ImageAspect.DEPTH
    assert (
        guess_image_aspect_flags(VkFormat.D24_UNORM_S8_UINT, True)
        == ImageAspect.DEPTH | ImageAspect.STENCIL
    )
    assert guess_image_aspect_flags(VkFormat.R8G8B8A8_UNORM, True) == ImageAspect.COLOR


def test_has_depth():
    assert has_depth(VkFormat.D16_UNORM)
    assert has_depth(VkFormat.D32_SFLOAT_S8_UINT)
    assert not has_depth(VkFormat.S8_UINT)
    assert not has_depth(VkFormat.B8G8R8A8_UNORM)


def test_usage_plain_texture():
    usage = pick_image_usage(TextureDesc(), VkFormat.R8G8B8A8_UNORM)
    assert usage == ImageUsage.TRANSFER_SRC | ImageUsage.TRANSFER_DST | ImageUsage.SAMPLED


def test_usage_color_render_target_with_storage():
    desc = TextureDesc(is_render_target=True, is_uav=True)
    usage = pick_image_usage(desc, VkFormat.R16G16B16A16_SFLOAT)
    assert ImageUsage.COLOR_ATTACHMENT in usage
    assert ImageUsage.INPUT_ATTACHMENT in usage
    assert ImageUsage.STORAGE in usage
    assert ImageUsage.DEPTH_STENCIL_ATTACHMENT not in usage


def test_usage_depth_render_target():
    desc = TextureDesc(is_render_target=True)
    usage = pick_image_usage(desc, VkFormat.D32_SFLOAT)
    assert ImageUsage.DEPTH_STENCIL_ATTACHMENT in usage
    assert ImageUsage.COLOR_ATTACHMENT not in usage
    assert ImageUsage.STORAGE not in usage