"""Texture formats and the image settings derived from them."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Format(enum.IntEnum):
    """Engine-side texture formats."""

    UNKNOWN = 0
    R8_UINT = enum.auto()
    R8_SINT = enum.auto()
    R8_UNORM = enum.auto()
    R8_SNORM = enum.auto()
    RG8_UINT = enum.auto()
    RG8_SINT = enum.auto()
    RG8_UNORM = enum.auto()
    RG8_SNORM = enum.auto()
    R16_UINT = enum.auto()
    R16_SINT = enum.auto()
    R16_UNORM = enum.auto()
    R16_SNORM = enum.auto()
    R16_FLOAT = enum.auto()
    BGRA4_UNORM = enum.auto()
    B5G6R5_UNORM = enum.auto()
    B5G5R5A1_UNORM = enum.auto()
    RGBA8_UINT = enum.auto()
    RGBA8_SINT = enum.auto()
    RGBA8_UNORM = enum.auto()
    RGBA8_SNORM = enum.auto()
    BGRA8_UNORM = enum.auto()
    SRGBA8_UNORM = enum.auto()
    SBGRA8_UNORM = enum.auto()
    R10G10B10A2_UNORM = enum.auto()
    R11G11B10_FLOAT = enum.auto()
    RG16_UINT = enum.auto()
    RG16_SINT = enum.auto()
    RG16_UNORM = enum.auto()
    RG16_SNORM = enum.auto()
    RG16_FLOAT = enum.auto()
    R32_UINT = enum.auto()
    R32_SINT = enum.auto()
    R32_FLOAT = enum.auto()
    RGBA16_UINT = enum.auto()
    RGBA16_SINT = enum.auto()
    RGBA16_FLOAT = enum.auto()
    RGBA16_UNORM = enum.auto()
    RGBA16_SNORM = enum.auto()
    RG32_UINT = enum.auto()
    RG32_SINT = enum.auto()
    RG32_FLOAT = enum.auto()
    RGB32_UINT = enum.auto()
    RGB32_SINT = enum.auto()
    RGB32_FLOAT = enum.auto()
    RGBA32_UINT = enum.auto()
    RGBA32_SINT = enum.auto()
    RGBA32_FLOAT = enum.auto()
    D16 = enum.auto()
    D24S8 = enum.auto()
    X24G8_UINT = enum.auto()
    D32 = enum.auto()
    D32S8 = enum.auto()
    X32G8_UINT = enum.auto()
    BC1_UNORM = enum.auto()
    BC1_UNORM_SRGB = enum.auto()
    BC2_UNORM = enum.auto()
    BC2_UNORM_SRGB = enum.auto()
    BC3_UNORM = enum.auto()
    BC3_UNORM_SRGB = enum.auto()
    BC4_UNORM = enum.auto()
    BC4_SNORM = enum.auto()
    BC5_UNORM = enum.auto()
    BC5_SNORM = enum.auto()
    BC6H_UFLOAT = enum.auto()
    BC6H_SFLOAT = enum.auto()
    BC7_UNORM = enum.auto()
    BC7_UNORM_SRGB = enum.auto()


class VkFormat(enum.IntEnum):
    """Vulkan format codes used by the engine."""

    UNDEFINED = 0
    B4G4R4A4_UNORM_PACK16 = 3
    B5G6R5_UNORM_PACK16 = 5
    B5G5R5A1_UNORM_PACK16 = 7
    R8_UNORM = 9
    R8_SNORM = 10
    R8_UINT = 13
    R8_SINT = 14
    R8G8_UNORM = 16
    R8G8_SNORM = 17
    R8G8_UINT = 20
    R8G8_SINT = 21
    R8G8B8A8_UNORM = 37
    R8G8B8A8_SNORM = 38
    R8G8B8A8_UINT = 41
    R8G8B8A8_SINT = 42
    R8G8B8A8_SRGB = 43
    B8G8R8A8_UNORM = 44
    B8G8R8A8_SRGB = 50
    A2B10G10R10_UNORM_PACK32 = 64
    R16_UNORM = 70
    R16_SNORM = 71
    R16_UINT = 74
    R16_SINT = 75
    R16_SFLOAT = 76
    R16G16_UNORM = 77
    R16G16_SNORM = 78
    R16G16_UINT = 81
    R16G16_SINT = 82
    R16G16_SFLOAT = 83
    R16G16B16A16_UNORM = 91
    R16G16B16A16_SNORM = 92
    R16G16B16A16_UINT = 95
    R16G16B16A16_SINT = 96
    R16G16B16A16_SFLOAT = 97
    R32_UINT = 98
    R32_SINT = 99
    R32_SFLOAT = 100
    R32G32_UINT = 101
    R32G32_SINT = 102
    R32G32_SFLOAT = 103
    R32G32B32_UINT = 104
    R32G32B32_SINT = 105
    R32G32B32_SFLOAT = 106
    R32G32B32A32_UINT = 107
    R32G32B32A32_SINT = 108
    R32G32B32A32_SFLOAT = 109
    B10G11R11_UFLOAT_PACK32 = 122
    D16_UNORM = 124
    X8_D24_UNORM_PACK32 = 125
    D32_SFLOAT = 126
    S8_UINT = 127
    D16_UNORM_S8_UINT = 128
    D24_UNORM_S8_UINT = 129
    D32_SFLOAT_S8_UINT = 130
    BC1_RGBA_UNORM_BLOCK = 133
    BC1_RGBA_SRGB_BLOCK = 134
    BC2_UNORM_BLOCK = 135
    BC2_SRGB_BLOCK = 136
    BC3_UNORM_BLOCK = 137
    BC3_SRGB_BLOCK = 138
    BC4_UNORM_BLOCK = 139
    BC4_SNORM_BLOCK = 140
    BC5_UNORM_BLOCK = 141
    BC5_SNORM_BLOCK = 142
    BC6H_UFLOAT_BLOCK = 143
    BC6H_SFLOAT_BLOCK = 144
    BC7_UNORM_BLOCK = 145
    BC7_SRGB_BLOCK = 146


class ImageAspect(enum.IntFlag):
    """Aspects of an image a view can address."""

    COLOR = 0x1
    DEPTH = 0x2
    STENCIL = 0x4


class ImageUsage(enum.IntFlag):
    """Ways an image may be used."""

    TRANSFER_SRC = 0x01
    TRANSFER_DST = 0x02
    SAMPLED = 0x04
    STORAGE = 0x08
    COLOR_ATTACHMENT = 0x10
    DEPTH_STENCIL_ATTACHMENT = 0x20
    TRANSIENT_ATTACHMENT = 0x40
    INPUT_ATTACHMENT = 0x80


class ImageType(enum.IntEnum):
    """Dimensionality of an image."""

    TYPE_1D = 0
    TYPE_2D = 1
    TYPE_3D = 2


class SampleCount(enum.IntEnum):
    """Multisample counts supported for images."""

    COUNT_1 = 1
    COUNT_2 = 2
    COUNT_4 = 4
    COUNT_8 = 8


class SamplerAddressMode(enum.Enum):
    """Engine-side sampler addressing modes."""

    CLAMP_TO_EDGE = enum.auto()
    REPEAT = enum.auto()
    CLAMP_TO_BORDER = enum.auto()
    MIRRORED_REPEAT = enum.auto()
    MIRROR_CLAMP_TO_EDGE = enum.auto()


class VkSamplerAddressMode(enum.IntEnum):
    """Vulkan sampler addressing modes."""

    REPEAT = 0
    MIRRORED_REPEAT = 1
    CLAMP_TO_EDGE = 2
    CLAMP_TO_BORDER = 3
    MIRROR_CLAMP_TO_EDGE = 4


@dataclass
class TextureDesc:
    """Description of a texture to create."""

    width: int = 1
    height: int = 1
    depth: int = 1
    array_layers: int = 1
    mip_levels: int = 1
    dimension: int = 2
    sample_count: int = 1
    format: Format = Format.UNKNOWN
    is_render_target: bool = False
    is_uav: bool = False
    debug_name: str = ""


_FORMAT_MAP: tuple[tuple[Format, VkFormat], ...] = (
    (Format.UNKNOWN, VkFormat.UNDEFINED),
    (Format.R8_UINT, VkFormat.R8_UINT),
    (Format.R8_SINT, VkFormat.R8_SINT),
    (Format.R8_UNORM, VkFormat.R8_UNORM),
    (Format.R8_SNORM, VkFormat.R8_SNORM),
    (Format.RG8_UINT, VkFormat.R8G8_UINT),
    (Format.RG8_SINT, VkFormat.R8G8_SINT),
    (Format.RG8_UNORM, VkFormat.R8G8_UNORM),
    (Format.RG8_SNORM, VkFormat.R8G8_SNORM),
    (Format.R16_UINT, VkFormat.R16_UINT),
    (Format.R16_SINT, VkFormat.R16_SINT),
    (Format.R16_UNORM, VkFormat.R16_UNORM),
    (Format.R16_SNORM, VkFormat.R16_SNORM),
    (Format.R16_FLOAT, VkFormat.R16_SFLOAT),
    (Format.BGRA4_UNORM, VkFormat.B4G4R4A4_UNORM_PACK16),
    (Format.B5G6R5_UNORM, VkFormat.B5G6R5_UNORM_PACK16),
    (Format.B5G5R5A1_UNORM, VkFormat.B5G5R5A1_UNORM_PACK16),
    (Format.RGBA8_UINT, VkFormat.R8G8B8A8_UINT),
    (Format.RGBA8_SINT, VkFormat.R8G8B8A8_SINT),
    (Format.RGBA8_UNORM, VkFormat.R8G8B8A8_UNORM),
    (Format.RGBA8_SNORM, VkFormat.R8G8B8A8_SNORM),
    (Format.BGRA8_UNORM, VkFormat.B8G8R8A8_UNORM),
    (Format.SRGBA8_UNORM, VkFormat.R8G8B8A8_SRGB),
    (Format.SBGRA8_UNORM, VkFormat.B8G8R8A8_SRGB),
    (Format.R10G10B10A2_UNORM, VkFormat.A2B10G10R10_UNORM_PACK32),
    (Format.R11G11B10_FLOAT, VkFormat.B10G11R11_UFLOAT_PACK32),
    (Format.RG16_UINT, VkFormat.R16G16_UINT),
    (Format.RG16_SINT, VkFormat.R16G16_SINT),
    (Format.RG16_UNORM, VkFormat.R16G16_UNORM),
    (Format.RG16_SNORM, VkFormat.R16G16_SNORM),
    (Format.RG16_FLOAT, VkFormat.R16G16_SFLOAT),
    (Format.R32_UINT, VkFormat.R32_UINT),
    (Format.R32_SINT, VkFormat.R32_SINT),
    (Format.R32_FLOAT, VkFormat.R32_SFLOAT),
    (Format.RGBA16_UINT, VkFormat.R16G16B16A16_UINT),
    (Format.RGBA16_SINT, VkFormat.R16G16B16A16_SINT),
    (Format.RGBA16_FLOAT, VkFormat.R16G16B16A16_SFLOAT),
    (Format.RGBA16_UNORM, VkFormat.R16G16B16A16_UNORM),
    (Format.RGBA16_SNORM, VkFormat.R16G16B16A16_SNORM),
    (Format.RG32_UINT, VkFormat.R32G32_UINT),
    (Format.RG32_SINT, VkFormat.R32G32_SINT),
    (Format.RG32_FLOAT, VkFormat.R32G32_SFLOAT),
    (Format.RGB32_UINT, VkFormat.R32G32B32_UINT),
    (Format.RGB32_SINT, VkFormat.R32G32B32_SINT),
    (Format.RGB32_FLOAT, VkFormat.R32G32B32_SFLOAT),
    (Format.RGBA32_UINT, VkFormat.R32G32B32A32_UINT),
    (Format.RGBA32_SINT, VkFormat.R32G32B32A32_SINT),
    (Format.RGBA32_FLOAT, VkFormat.R32G32B32A32_SFLOAT),
    (Format.D16, VkFormat.D16_UNORM),
    (Format.D24S8, VkFormat.D24_UNORM_S8_UINT),
    (Format.X24G8_UINT, VkFormat.D24_UNORM_S8_UINT),
    (Format.D32, VkFormat.D32_SFLOAT),
    (Format.D32S8, VkFormat.D32_SFLOAT_S8_UINT),
    (Format.X32G8_UINT, VkFormat.D32_SFLOAT_S8_UINT),
    (Format.BC1_UNORM, VkFormat.BC1_RGBA_UNORM_BLOCK),
    (Format.BC1_UNORM_SRGB, VkFormat.BC1_RGBA_SRGB_BLOCK),
    (Format.BC2_UNORM, VkFormat.BC2_UNORM_BLOCK),
    (Format.BC2_UNORM_SRGB, VkFormat.BC2_SRGB_BLOCK),
    (Format.BC3_UNORM, VkFormat.BC3_UNORM_BLOCK),
    (Format.BC3_UNORM_SRGB, VkFormat.BC3_SRGB_BLOCK),
    (Format.BC4_UNORM, VkFormat.BC4_UNORM_BLOCK),
    (Format.BC4_SNORM, VkFormat.BC4_SNORM_BLOCK),
    (Format.BC5_UNORM, VkFormat.BC5_UNORM_BLOCK),
    (Format.BC5_SNORM, VkFormat.BC5_SNORM_BLOCK),
    (Format.BC6H_UFLOAT, VkFormat.BC6H_UFLOAT_BLOCK),
    (Format.BC6H_SFLOAT, VkFormat.BC6H_SFLOAT_BLOCK),
    (Format.BC7_UNORM, VkFormat.BC7_UNORM_BLOCK),
    (Format.BC7_UNORM_SRGB, VkFormat.BC7_SRGB_BLOCK),
)

_TO_VK: dict[Format, VkFormat] = dict(_FORMAT_MAP)

_ADDRESS_MODES: dict[SamplerAddressMode, VkSamplerAddressMode] = {
    SamplerAddressMode.CLAMP_TO_EDGE: VkSamplerAddressMode.CLAMP_TO_EDGE,
    SamplerAddressMode.REPEAT: VkSamplerAddressMode.REPEAT,
    SamplerAddressMode.CLAMP_TO_BORDER: VkSamplerAddressMode.CLAMP_TO_BORDER,
    SamplerAddressMode.MIRRORED_REPEAT: VkSamplerAddressMode.MIRRORED_REPEAT,
    SamplerAddressMode.MIRROR_CLAMP_TO_EDGE: VkSamplerAddressMode.MIRROR_CLAMP_TO_EDGE,
}

_SAMPLES = {
    1: SampleCount.COUNT_1,
    2: SampleCount.COUNT_2,
    4: SampleCount.COUNT_4,
    8: SampleCount.COUNT_8,
}

_IMAGE_TYPES = {1: ImageType.TYPE_1D, 2: ImageType.TYPE_2D, 3: ImageType.TYPE_3D}

_DEPTH_ONLY = frozenset({VkFormat.D16_UNORM, VkFormat.X8_D24_UNORM_PACK32, VkFormat.D32_SFLOAT})
_DEPTH_STENCIL = frozenset(
    {VkFormat.D16_UNORM_S8_UINT, VkFormat.D24_UNORM_S8_UINT, VkFormat.D32_SFLOAT_S8_UINT}
)


def convert_format(format: Format | int) -> VkFormat:
    """The Vulkan format for an engine format."""
    try:
        return _TO_VK[Format(format)]
    except ValueError:
        raise ValueError(f"unknown format {format!r}") from None


def reverse_format(vk_format: VkFormat | int) -> Format:
    """The first engine format mapped to ``vk_format``; UNKNOWN if none is."""
    code = int(vk_format)
    for rhi_format, vk in _FORMAT_MAP:
        if vk == code:
            return rhi_format
    return Format.UNKNOWN


def convert_sampler_address_mode(mode: SamplerAddressMode) -> VkSamplerAddressMode:
    """The Vulkan addressing mode for an engine addressing mode."""
    return _ADDRESS_MODES.get(mode, VkSamplerAddressMode(0))


def pick_image_sample(samples: int) -> SampleCount:
    """The sample count for ``samples``; anything unsupported gives one."""
    return _SAMPLES.get(samples, SampleCount.COUNT_1)


def pick_image_type(dimension: int) -> ImageType:
    """The image type for a dimension; anything unsupported gives 1D."""
    return _IMAGE_TYPES.get(dimension, ImageType.TYPE_1D)


def guess_image_aspect_flags(vk_format: VkFormat | int, stencil: bool = False) -> ImageAspect:
    """The aspects a view of ``vk_format`` should address."""
    try:
        fmt = VkFormat(vk_format)
    except ValueError:
        return ImageAspect.COLOR
    if fmt in _DEPTH_ONLY:
        return ImageAspect.DEPTH
    if fmt is VkFormat.S8_UINT:
        return ImageAspect.STENCIL
    if fmt in _DEPTH_STENCIL:
        return ImageAspect.DEPTH | ImageAspect.STENCIL if stencil else ImageAspect.DEPTH
    return ImageAspect.COLOR


def has_depth(vk_format: VkFormat | int) -> bool:
    """Whether ``vk_format`` carries a depth component."""
    return guess_image_aspect_flags(vk_format, False) == ImageAspect.DEPTH


def pick_image_usage(desc: TextureDesc, vk_format: VkFormat | int) -> ImageUsage:
    """The usage flags a texture described by ``desc`` needs."""
    usage = ImageUsage.TRANSFER_SRC | ImageUsage.TRANSFER_DST | ImageUsage.SAMPLED
    if desc.is_render_target:
        usage |= ImageUsage.INPUT_ATTACHMENT
        if has_depth(vk_format):
            usage |= ImageUsage.DEPTH_STENCIL_ATTACHMENT
        else:
            usage |= ImageUsage.COLOR_ATTACHMENT
    if desc.is_uav:
        usage |= ImageUsage.STORAGE
    return usage