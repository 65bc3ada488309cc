"""Data-driven render pipeline construction."""

from __future__ import annotations

from dataclasses import dataclass

from indexed_view.rendering.geometry import VERTEX_STRIDE
from indexed_view.rendering.usage import shader_stage


@dataclass(frozen=True, slots=True)
class BindingSpec:
    """One bind-group layout entry."""

    binding: int
    kind: str  # texture|sampler
    sample_type: str = "float"
    sampler_type: str = "filtering"


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    label: str
    index_format: str
    palette_format: str
    index_filter: str
    palette_filter: str
    bindings: tuple[BindingSpec, ...]
    shader_source: str
    vertex_entry_point: str = "vs_main"
    fragment_entry_point: str = "fs_main"
    topology: str = "triangle-list"
    index_format_name: str = "uint16"


@dataclass(frozen=True, slots=True)
class PipelineResources:
    pipeline: object
    bind_group_layout: object
    pipeline_layout: object
    shader: object


def build_pipeline(device: object, config: PipelineConfig, surface_format: str) -> PipelineResources:
    """Create shader, layouts and render pipeline targeting ``surface_format``."""
    visibility = shader_stage("FRAGMENT")
    entries: list[dict[str, object]] = []
    for binding_spec in config.bindings:
        entry: dict[str, object] = {"binding": binding_spec.binding, "visibility": visibility}
        if binding_spec.kind == "texture":
            entry["texture"] = {
                "sample_type": binding_spec.sample_type,
                "view_dimension": "2d",
                "multisampled": False,
            }
        elif binding_spec.kind == "sampler":
            entry["sampler"] = {"type": binding_spec.sampler_type}
        else:
            raise ValueError(f"unsupported binding kind: {binding_spec.kind}")
        entries.append(entry)
    bind_group_layout = device.create_bind_group_layout(  # type: ignore[attr-defined]
        label=f"{config.label}.bind_group_layout",
        entries=entries,
    )
    pipeline_layout = device.create_pipeline_layout(  # type: ignore[attr-defined]
        label=f"{config.label}.pipeline_layout",
        bind_group_layouts=[bind_group_layout],
    )
    shader = device.create_shader_module(  # type: ignore[attr-defined]
        label=f"{config.label}.shader",
        code=config.shader_source,
    )
    pipeline = device.create_render_pipeline(  # type: ignore[attr-defined]
        label=f"{config.label}.pipeline",
        layout=pipeline_layout,
        vertex={
            "module": shader,
            "entry_point": config.vertex_entry_point,
            "buffers": [
                {
                    "array_stride": VERTEX_STRIDE,
                    "step_mode": "vertex",
                    "attributes": [
                        {"shader_location": 0, "offset": 0, "format": "float32x2"},
                        {"shader_location": 1, "offset": 8, "format": "float32x2"},
                    ],
                }
            ],
        },
        primitive={
            "topology": config.topology,
            "front_face": "ccw",
            "cull_mode": "back",
        },
        depth_stencil=None,
        multisample={"count": 1, "mask": 0xFFFFFFFF, "alpha_to_coverage_enabled": False},
        fragment={
            "module": shader,
            "entry_point": config.fragment_entry_point,
            "targets": [
                {
                    "format": surface_format,
                    "blend": {
                        "color": {"operation": "add", "src_factor": "one", "dst_factor": "zero"},
                        "alpha": {"operation": "add", "src_factor": "one", "dst_factor": "zero"},
                    },
                    "write_mask": 0xF,
                }
            ],
        },
    )
    return PipelineResources(
        pipeline=pipeline,
        bind_group_layout=bind_group_layout,
        pipeline_layout=pipeline_layout,
        shader=shader,
    )


_INDEXED_PALETTE_WGSL = """
struct VertexOut {
    @builtin(position) position: vec4<f32>,
    @location(0) uv: vec2<f32>,
};

@group(0) @binding(0) var index_texture: texture_2d<f32>;
@group(0) @binding(1) var index_sampler: sampler;
@group(0) @binding(2) var palette_texture: texture_2d<f32>;
@group(0) @binding(3) var palette_sampler: sampler;

@vertex
fn vs_main(@location(0) position: vec2<f32>, @location(1) uv: vec2<f32>) -> VertexOut {
    var out: VertexOut;
    out.position = vec4<f32>(position, 0.0, 1.0);
    out.uv = uv;
    return out;
}

@fragment
fn fs_main(in: VertexOut) -> @location(0) vec4<f32> {
    let value = textureSample(index_texture, index_sampler, in.uv).r;
    let index = u32(value * 255.0 + 0.5);
    let coord = vec2<f32>((f32(index) + 0.5) / 256.0, 0.5);
    return textureSample(palette_texture, palette_sampler, coord);
}
"""

INDEXED_PALETTE_PIPELINE = PipelineConfig(
    label="indexed_view.indexed_palette",
    index_format="r8unorm",
    palette_format="rgba8unorm",
    index_filter="nearest",
    palette_filter="nearest",
    bindings=(
        BindingSpec(binding=0, kind="texture", sample_type="unfilterable-float"),
        BindingSpec(binding=1, kind="sampler", sampler_type="non-filtering"),
        BindingSpec(binding=2, kind="texture", sample_type="float"),
        BindingSpec(binding=3, kind="sampler", sampler_type="filtering"),
    ),
    shader_source=_INDEXED_PALETTE_WGSL,
)

__all__ = [
    "BindingSpec",
    "INDEXED_PALETTE_PIPELINE",
    "PipelineConfig",
    "PipelineResources",
    "build_pipeline",
]
