"""Export a document from the property graph to glTF JSON plus resources."""
from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Optional

from gltfgraph.codec.accessor_iter import AccessorIter
from gltfgraph.extensions.registry import ExtensionRegistry, default_registry
from gltfgraph.graph.ids import unique_name
from gltfgraph.graph.model import (
    AlphaMode,
    ComponentType,
    ElementType,
    PrimitiveMode,
    TextureSlot,
    WrappingMode,
)
from gltfgraph.graph.store import GraphStore
from gltfgraph.gltf.document import Document
from gltfgraph.gltf.image import extension_for_mime
from gltfgraph.obs.events import EventBus

from .context import ExportContext
from .format import GltfFormat
from .layout import BufferPacker
from .resolver import is_data_uri

LOGGER = logging.getLogger(__name__)

GENERATOR = "gltfgraph"

ARRAY_BUFFER = 34962
ELEMENT_ARRAY_BUFFER = 34963

ZERO3 = (0.0, 0.0, 0.0)
ONE3 = (1.0, 1.0, 1.0)
IDENTITY_QUAT = (0.0, 0.0, 0.0, 1.0)

COLLECTION_ORDER = (
    "extensionsUsed",
    "extensionsRequired",
    "asset",
    "scene",
    "scenes",
    "nodes",
    "meshes",
    "materials",
    "textures",
    "images",
    "samplers",
    "skins",
    "animations",
    "accessors",
    "bufferViews",
    "buffers",
    "extensions",
    "extras",
)


def _named(weight: Any, payload: Dict[str, Any]) -> Dict[str, Any]:
    if getattr(weight, "name", None) is not None:
        payload["name"] = weight.name
    if getattr(weight, "extras", None) is not None:
        payload["extras"] = copy.deepcopy(weight.extras)
    return payload


class _Exporter:
    def __init__(self, ctx: ExportContext) -> None:
        self.ctx = ctx
        self.packer = BufferPacker()
        self.resources: Dict[str, bytes] = {}
        self.implicit_buffer: Optional[int] = None

    @property
    def json(self) -> Dict[str, Any]:
        return self.ctx.json

    def _index(self, collection: str, handles: List[Any]) -> None:
        self.ctx.indices[collection] = {handle: position for position, handle in enumerate(handles)}

    def _ref(self, collection: str, handle: Any, *, stage: str, owner: Any) -> Optional[int]:
        if handle is None:
            return None
        index = self.ctx.index_of(collection, handle)
        if index is None:
            self.ctx.events.warn(
                f"omitting reference to a {collection[:-1]} that is not part of the document",
                stage=stage,
                target_ids=[owner.index, handle.index],
            )
        return index

    def _fallback_buffer(self, owner: Any, stage: str) -> int:
        buffers = self.ctx.indices["buffers"]
        self.ctx.events.warn(
            "entity has no buffer; packing it into the first buffer",
            stage=stage,
            target_ids=[owner.index],
        )
        if buffers:
            return 0
        if self.implicit_buffer is None:
            self.implicit_buffer = 0
        return self.implicit_buffer

    def _buffer_index(self, owner: Any, buffer: Any, stage: str) -> int:
        if buffer is not None:
            index = self.ctx.index_of("buffers", buffer)
            if index is not None:
                return index
        return self._fallback_buffer(owner, stage)

    def _targets(self) -> Dict[Any, int]:
        targets: Dict[Any, int] = {}
        for mesh in self.ctx.doc.meshes():
            for primitive in mesh.primitives():
                for accessor in primitive.attributes().values():
                    targets[accessor] = ARRAY_BUFFER
                for target in primitive.morph_targets():
                    for accessor in target.attributes().values():
                        targets[accessor] = ARRAY_BUFFER
                indices = primitive.indices()
                if indices is not None:
                    targets[indices] = ELEMENT_ARRAY_BUFFER
        return targets

    # Stages

    def export_asset(self) -> None:
        weight = self.ctx.doc.get()
        asset: Dict[str, Any] = {"version": "2.0", "generator": weight.generator or GENERATOR}
        if weight.copyright is not None:
            asset["copyright"] = weight.copyright
        self.json["asset"] = asset
        if weight.extras is not None:
            self.json["extras"] = copy.deepcopy(weight.extras)

    def index_entities(self) -> None:
        doc = self.ctx.doc
        self._index("buffers", doc.buffers())
        self._index("accessors", doc.accessors())
        self._index("images", doc.images())
        self._index("textures", doc.textures())
        self._index("materials", doc.materials())
        self._index("meshes", doc.meshes())
        self._index("nodes", doc.nodes())
        self._index("scenes", doc.scenes())
        self._index("skins", doc.skins())
        self._index("animations", doc.animations())

    def export_accessors(self) -> None:
        targets = self._targets()
        items = []
        for accessor in self.ctx.doc.accessors():
            weight = accessor.get()
            stream = AccessorIter(weight.data, weight.component_type, weight.element_type, weight.normalized)
            payload: Dict[str, Any] = {
                "componentType": int(ComponentType(weight.component_type)),
                "count": stream.count,
                "type": ElementType(weight.element_type).value,
            }
            if stream.count:
                buffer_index = self._buffer_index(accessor, accessor.buffer(), "accessors")
                payload["bufferView"] = self.packer.add(
                    buffer_index, stream.data, target=targets.get(accessor)
                )
                payload["min"] = stream.min()
                payload["max"] = stream.max()
            if weight.normalized:
                payload["normalized"] = True
            items.append(_named(weight, payload))
        self.json["accessors"] = items

    def export_images(self) -> None:
        items = []
        taken = {
            image.get().uri for image in self.ctx.doc.images() if image.get().uri and not is_data_uri(image.get().uri)
        }
        for position, image in enumerate(self.ctx.doc.images()):
            weight = image.get()
            mime_type = image.mime_type()
            payload: Dict[str, Any] = {}
            if image.buffer() is not None:
                buffer_index = self._buffer_index(image, image.buffer(), "images")
                payload["bufferView"] = self.packer.add(buffer_index, weight.data)
                payload["mimeType"] = mime_type or "image/png"
            elif weight.uri and not is_data_uri(weight.uri):
                payload["uri"] = weight.uri
                self.resources[weight.uri] = weight.data
            elif weight.data:
                extension = extension_for_mime(mime_type)
                uri = unique_name("image_{}" + extension, taken, start=position)
                taken.add(uri)
                payload["uri"] = uri
                self.resources[uri] = weight.data
            else:
                self.ctx.events.warn("image has neither a URI nor data", stage="images", target_ids=[image.index])
            if "mimeType" not in payload and weight.mime_type:
                payload["mimeType"] = weight.mime_type
            items.append(_named(weight, payload))
        self.json["images"] = items

    def export_buffers(self) -> None:
        buffers = self.ctx.doc.buffers()
        taken = {buffer.get().uri for buffer in buffers if buffer.get().uri}
        items = []
        # glTF buffers need byteLength >= 1; empty ones are dropped and views re-pointed.
        remap: Dict[int, int] = {}
        for position, buffer in enumerate(buffers):
            weight = buffer.get()
            byte_length = self.packer.byte_length(position)
            if not byte_length:
                self.ctx.events.warn(
                    "omitting buffer that holds no data", stage="buffers", target_ids=[buffer.index]
                )
                continue
            uri = weight.uri if weight.uri and not is_data_uri(weight.uri) else None
            if uri is None:
                uri = unique_name("buffer_{}.bin", taken, start=len(items))
                taken.add(uri)
            self.resources[uri] = self.packer.buffer_bytes(position)
            remap[position] = len(items)
            items.append(_named(weight, {"uri": uri, "byteLength": byte_length}))
        for view in self.packer.views:
            view["buffer"] = remap.get(view["buffer"], view["buffer"])
        self.ctx.indices["buffers"] = {
            handle: remap[position] for handle, position in self.ctx.indices["buffers"].items() if position in remap
        }
        if self.implicit_buffer is not None and not buffers:
            uri = unique_name("buffer_{}.bin", taken)
            self.resources[uri] = self.packer.buffer_bytes(self.implicit_buffer)
            items.append({"uri": uri, "byteLength": self.packer.byte_length(self.implicit_buffer)})
        self.json["buffers"] = items
        self.json["bufferViews"] = self.packer.views

    def export_textures(self) -> None:
        textures = []
        samplers = []
        for texture in self.ctx.doc.textures():
            weight = texture.get()
            sampler: Dict[str, Any] = {}
            if weight.mag_filter is not None:
                sampler["magFilter"] = int(weight.mag_filter)
            if weight.min_filter is not None:
                sampler["minFilter"] = int(weight.min_filter)
            if weight.wrap_s != WrappingMode.REPEAT:
                sampler["wrapS"] = int(weight.wrap_s)
            if weight.wrap_t != WrappingMode.REPEAT:
                sampler["wrapT"] = int(weight.wrap_t)
            samplers.append(sampler)

            payload: Dict[str, Any] = {"sampler": len(samplers) - 1}
            source = self._ref("images", texture.image(), stage="textures", owner=texture)
            if source is not None:
                payload["source"] = source
            textures.append(_named(weight, payload))
        self.json["textures"] = textures
        self.json["samplers"] = samplers

    def _texture_info(self, material, slot: TextureSlot) -> Optional[Dict[str, Any]]:
        index = self._ref("textures", material.texture(slot), stage="materials", owner=material)
        if index is None:
            return None
        info: Dict[str, Any] = {"index": index}
        tex_coord = material.tex_coord(slot)
        if tex_coord:
            info["texCoord"] = tex_coord
        weight = material.get()
        if slot is TextureSlot.NORMAL and weight.normal_scale != 1.0:
            info["scale"] = weight.normal_scale
        if slot is TextureSlot.OCCLUSION and weight.occlusion_strength != 1.0:
            info["strength"] = weight.occlusion_strength
        return info

    def export_materials(self) -> None:
        items = []
        for material in self.ctx.doc.materials():
            weight = material.get()
            pbr: Dict[str, Any] = {}
            if tuple(weight.base_color_factor) != (1.0, 1.0, 1.0, 1.0):
                pbr["baseColorFactor"] = list(weight.base_color_factor)
            if weight.metallic_factor != 1.0:
                pbr["metallicFactor"] = weight.metallic_factor
            if weight.roughness_factor != 1.0:
                pbr["roughnessFactor"] = weight.roughness_factor
            for slot, key in (
                (TextureSlot.BASE_COLOR, "baseColorTexture"),
                (TextureSlot.METALLIC_ROUGHNESS, "metallicRoughnessTexture"),
            ):
                info = self._texture_info(material, slot)
                if info is not None:
                    pbr[key] = info

            payload: Dict[str, Any] = {}
            if pbr:
                payload["pbrMetallicRoughness"] = pbr
            for slot, key in (
                (TextureSlot.NORMAL, "normalTexture"),
                (TextureSlot.OCCLUSION, "occlusionTexture"),
                (TextureSlot.EMISSIVE, "emissiveTexture"),
            ):
                info = self._texture_info(material, slot)
                if info is not None:
                    payload[key] = info
            if tuple(weight.emissive_factor) != ZERO3:
                payload["emissiveFactor"] = list(weight.emissive_factor)
            if AlphaMode(weight.alpha_mode) is not AlphaMode.OPAQUE:
                payload["alphaMode"] = AlphaMode(weight.alpha_mode).value
            if weight.alpha_cutoff != 0.5:
                payload["alphaCutoff"] = weight.alpha_cutoff
            if weight.double_sided:
                payload["doubleSided"] = True
            items.append(_named(weight, payload))
        self.json["materials"] = items

    def _attribute_map(self, owner, attributes) -> Dict[str, int]:
        result = {}
        for semantic, accessor in attributes.items():
            index = self._ref("accessors", accessor, stage="meshes", owner=owner)
            if index is not None:
                result[semantic] = index
        return result

    def export_meshes(self) -> None:
        items = []
        for mesh in self.ctx.doc.meshes():
            weight = mesh.get()
            primitives = []
            for primitive in mesh.primitives():
                primitive_weight = primitive.get()
                payload: Dict[str, Any] = {"attributes": self._attribute_map(primitive, primitive.attributes())}
                indices = self._ref("accessors", primitive.indices(), stage="meshes", owner=primitive)
                if indices is not None:
                    payload["indices"] = indices
                material = self._ref("materials", primitive.material(), stage="meshes", owner=primitive)
                if material is not None:
                    payload["material"] = material
                mode = PrimitiveMode(primitive_weight.mode)
                if mode is not PrimitiveMode.TRIANGLES:
                    payload["mode"] = int(mode)
                targets = [
                    self._attribute_map(primitive, target.attributes()) for target in primitive.morph_targets()
                ]
                if targets:
                    payload["targets"] = targets
                if primitive_weight.extras is not None:
                    payload["extras"] = copy.deepcopy(primitive_weight.extras)
                primitives.append(payload)
            payload = {"primitives": primitives}
            if weight.weights:
                payload["weights"] = list(weight.weights)
            items.append(_named(weight, payload))
        self.json["meshes"] = items

    def export_nodes(self) -> None:
        items = []
        for node in self.ctx.doc.nodes():
            weight = node.get()
            payload: Dict[str, Any] = {}
            if tuple(weight.translation) != ZERO3:
                payload["translation"] = list(weight.translation)
            if tuple(weight.rotation) != IDENTITY_QUAT:
                payload["rotation"] = list(weight.rotation)
            if tuple(weight.scale) != ONE3:
                payload["scale"] = list(weight.scale)
            if weight.weights:
                payload["weights"] = list(weight.weights)
            mesh = self._ref("meshes", node.mesh(), stage="nodes", owner=node)
            if mesh is not None:
                payload["mesh"] = mesh
            items.append(_named(weight, payload))
        self.json["nodes"] = items

    def export_hierarchy(self) -> None:
        """Second node pass: children and skins need every index map."""

        for node, position in self.ctx.indices["nodes"].items():
            payload = self.json["nodes"][position]
            children = [
                index
                for index in (
                    self._ref("nodes", child, stage="nodes", owner=node) for child in node.children()
                )
                if index is not None
            ]
            if children:
                payload["children"] = children
            skin = self._ref("skins", node.skin(), stage="nodes", owner=node)
            if skin is not None:
                payload["skin"] = skin

    def export_scenes(self) -> None:
        items = []
        for scene in self.ctx.doc.scenes():
            nodes = [
                index
                for index in (self._ref("nodes", node, stage="scenes", owner=scene) for node in scene.nodes())
                if index is not None
            ]
            items.append(_named(scene.get(), {"nodes": nodes}))
        self.json["scenes"] = items
        default = self._ref("scenes", self.ctx.doc.default_scene(), stage="scenes", owner=self.ctx.doc)
        if default is not None:
            self.json["scene"] = default

    def export_skins(self) -> None:
        items = []
        for skin in self.ctx.doc.skins():
            payload: Dict[str, Any] = {
                "joints": [
                    index
                    for index in (self._ref("nodes", joint, stage="skins", owner=skin) for joint in skin.joints())
                    if index is not None
                ]
            }
            matrices = self._ref("accessors", skin.inverse_bind_matrices(), stage="skins", owner=skin)
            if matrices is not None:
                payload["inverseBindMatrices"] = matrices
            skeleton = self._ref("nodes", skin.skeleton(), stage="skins", owner=skin)
            if skeleton is not None:
                payload["skeleton"] = skeleton
            items.append(_named(skin.get(), payload))
        self.json["skins"] = items

    def export_animations(self) -> None:
        items = []
        for animation in self.ctx.doc.animations():
            samplers: List[Dict[str, Any]] = []
            sampler_indices: Dict[Any, int] = {}
            channels = []
            for channel in animation.channels():
                sampler = channel.sampler()
                target = self._ref("nodes", channel.target(), stage="animations", owner=channel)
                if sampler is None or target is None:
                    self.ctx.events.warn(
                        "skipping animation channel without a sampler or target node",
                        stage="animations",
                        target_ids=[channel.index],
                    )
                    continue
                if sampler not in sampler_indices:
                    sampler_json = self._sampler(sampler)
                    if sampler_json is None:
                        continue
                    sampler_indices[sampler] = len(samplers)
                    samplers.append(sampler_json)
                channel_weight = channel.get()
                payload: Dict[str, Any] = {
                    "sampler": sampler_indices[sampler],
                    "target": {"node": target, "path": channel_weight.path.value},
                }
                if channel_weight.extras is not None:
                    payload["extras"] = copy.deepcopy(channel_weight.extras)
                channels.append(payload)
            items.append(_named(animation.get(), {"channels": channels, "samplers": samplers}))
        self.json["animations"] = items

    def _sampler(self, sampler) -> Optional[Dict[str, Any]]:
        input_index = self._ref("accessors", sampler.input(), stage="animations", owner=sampler)
        output_index = self._ref("accessors", sampler.output(), stage="animations", owner=sampler)
        if input_index is None or output_index is None:
            self.ctx.events.warn(
                "skipping animation sampler without input or output accessor",
                stage="animations",
                target_ids=[sampler.index],
            )
            return None
        weight = sampler.get()
        payload: Dict[str, Any] = {"input": input_index, "output": output_index}
        if weight.interpolation.value != "LINEAR":
            payload["interpolation"] = weight.interpolation.value
        if weight.extras is not None:
            payload["extras"] = copy.deepcopy(weight.extras)
        return payload

    def finish(self) -> Dict[str, Any]:
        ordered: Dict[str, Any] = {}
        for key in COLLECTION_ORDER:
            value = self.json.get(key)
            if value is None or (isinstance(value, (list, dict)) and not value and key != "asset"):
                continue
            ordered[key] = value
        return ordered


def export_gltf(
    store: GraphStore,
    doc: Document,
    *,
    registry: Optional[ExtensionRegistry] = None,
    events: Optional[EventBus] = None,
) -> GltfFormat:
    """Serialize ``doc`` into a :class:`GltfFormat`.

    Accessor and image bytes are packed into their buffers with 4-byte
    alignment. Buffers and images without a usable URI get generated ones
    (``buffer_N.bin``, ``image_N.png``) and their bytes are returned as
    resources keyed by URI.
    """

    ctx = ExportContext(store=store, doc=doc, json={}, events=events if events is not None else EventBus())
    exporter = _Exporter(ctx)
    exporter.export_asset()
    exporter.index_entities()
    exporter.export_accessors()
    exporter.export_images()
    exporter.export_buffers()
    exporter.export_textures()
    exporter.export_materials()
    exporter.export_meshes()
    exporter.export_nodes()
    exporter.export_skins()
    exporter.export_hierarchy()
    exporter.export_scenes()
    exporter.export_animations()
    (registry if registry is not None else default_registry()).export_all(ctx)
    LOGGER.debug("Exported document %s with %d resources", doc.index, len(exporter.resources))
    return GltfFormat(json=exporter.finish(), resources=exporter.resources)


__all__ = ["export_gltf"]
