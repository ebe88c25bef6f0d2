"""Import a glTF JSON document into the property graph.

Stages run in dependency order: buffers, accessors, images, textures,
materials, meshes, nodes (and parenting), scenes, skins, animations, then the
registered extensions. Each stage records the handles it creates so later
stages can resolve JSON indices.
"""
from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from gltfgraph.config import ImportOptions
from gltfgraph.errors import FormatError, InvalidIndexError
from gltfgraph.extensions.registry import ExtensionRegistry, default_registry
from gltfgraph.graph.model import (
    AccessorWeight,
    AlphaMode,
    AnimationChannelWeight,
    AnimationSamplerWeight,
    AnimationWeight,
    BufferWeight,
    DocumentWeight,
    ImageWeight,
    Interpolation,
    MagFilter,
    MaterialWeight,
    MeshWeight,
    MinFilter,
    NodeWeight,
    PrimitiveMode,
    PrimitiveWeight,
    SceneWeight,
    Semantic,
    SkinWeight,
    TargetPath,
    TextureSlot,
    TextureWeight,
    WrappingMode,
)
from gltfgraph.graph.store import GraphStore
from gltfgraph.gltf.animation import AnimationSampler
from gltfgraph.gltf.document import Document
from gltfgraph.gltf.node import Node, decompose_matrix
from gltfgraph.gltf.primitive import is_index_accessor
from gltfgraph.obs.events import EventBus

from .context import ImportContext, is_index
from .format import GltfFormat
from .layout import accessor_types, lookup, read_accessor, read_buffer_view
from .resolver import Resolver, data_uri_mime_type, is_data_uri, resolve_uri

LOGGER = logging.getLogger(__name__)

E = TypeVar("E")

ENTITY_COLLECTIONS = (
    "accessors",
    "animations",
    "buffers",
    "bufferViews",
    "cameras",
    "images",
    "materials",
    "meshes",
    "nodes",
    "samplers",
    "scenes",
    "skins",
    "textures",
)


def _name(item: Dict[str, Any]) -> Optional[str]:
    name = item.get("name")
    return name if isinstance(name, str) else None


def _extras(item: Dict[str, Any]) -> Any:
    return copy.deepcopy(item.get("extras"))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class _Importer:
    def __init__(
        self,
        ctx: ImportContext,
        resources: Dict[str, bytes],
        resolver: Optional[Resolver],
        registry: ExtensionRegistry,
    ) -> None:
        self.ctx = ctx
        self.resources = resources
        self.resolver = resolver
        self.registry = registry
        self.image_payloads: List[Optional[bytes]] = []

    # Helpers

    def _objects(self, collection: str) -> List[Dict[str, Any]]:
        items = self.ctx.items(collection)
        for position, item in enumerate(items):
            if not isinstance(item, dict):
                raise FormatError(f"{collection}[{position}] must be a JSON object")
        return items

    def _fail_or_warn(self, message: str, *, stage: str) -> None:
        if self.ctx.options.strict:
            raise FormatError(message)
        self.ctx.events.warn(message, stage=stage)

    def _enum(self, cls: Type[E], value: Any, default: Any, *, stage: str) -> Any:
        if value is None:
            return default
        try:
            return cls(value)
        except ValueError:
            self._fail_or_warn(f"invalid {cls.__name__} value {value!r}", stage=stage)
            return default

    def _number(self, item: Dict[str, Any], key: str, default: float, *, stage: str) -> float:
        value = item.get(key, default)
        if not _is_number(value):
            self._fail_or_warn(f"{key} must be a number, got {value!r}", stage=stage)
            return default
        return float(value)

    def _vector(self, item: Dict[str, Any], key: str, default: tuple, *, stage: str) -> tuple:
        value = item.get(key)
        if value is None:
            return default
        if not isinstance(value, list) or len(value) != len(default) or not all(map(_is_number, value)):
            self._fail_or_warn(f"{key} must be a list of {len(default)} numbers", stage=stage)
            return default
        return tuple(float(component) for component in value)

    def _weights(self, value: Any, *, stage: str) -> Optional[List[float]]:
        if value is None:
            return None
        if not isinstance(value, list) or not all(map(_is_number, value)):
            self._fail_or_warn("weights must be a list of numbers", stage=stage)
            return None
        return [float(component) for component in value]

    # Resources

    async def _payload(self, position: int, uri: Optional[str], *, buffer: bool) -> Optional[bytes]:
        resources = self.resources
        if buffer and len(self.ctx.items("buffers")) == 1 and len(resources) == 1:
            return next(iter(resources.values()))
        key = uri if uri else ("bin" if buffer and position == 0 else None)
        if key is not None and key in resources:
            return resources[key]
        return await resolve_uri(uri, self.resolver)

    async def resolve_payloads(self) -> List[Optional[bytes]]:
        """Fetch every buffer and external image payload concurrently."""

        buffers = self._objects("buffers")
        images = self._objects("images")

        async def _nothing() -> None:
            return None

        tasks = [self._payload(i, item.get("uri"), buffer=True) for i, item in enumerate(buffers)]
        tasks += [
            _nothing() if "bufferView" in item else self._payload(i, item.get("uri"), buffer=False)
            for i, item in enumerate(images)
        ]
        results = await asyncio.gather(*tasks)
        self.image_payloads = list(results[len(buffers) :])
        return list(results[: len(buffers)])

    # Stages

    def import_document(self) -> None:
        asset = self.ctx.json.get("asset")
        if not isinstance(asset, dict):
            self._fail_or_warn("document has no asset object", stage="document")
            asset = {}
        version = asset.get("version")
        if version is not None and not str(version).startswith("2"):
            raise FormatError(f"unsupported glTF version {version!r}")
        self.ctx.doc.set(
            DocumentWeight(
                generator=asset.get("generator"),
                copyright=asset.get("copyright"),
                extras=_extras(self.ctx.json),
            )
        )

    def import_buffers(self, payloads: Sequence[Optional[bytes]]) -> None:
        handles = []
        for position, (item, payload) in enumerate(zip(self._objects("buffers"), payloads)):
            uri = item.get("uri")
            byte_length = item.get("byteLength", 0)
            if payload is None:
                if uri or (is_index(byte_length) and byte_length > 0):
                    self.ctx.events.warn(
                        f"buffer {position} could not be resolved; leaving it empty",
                        stage="buffers",
                        uri=None if is_data_uri(uri) else uri,
                    )
                payload = b""
            if is_index(byte_length) and len(payload) > byte_length:
                payload = payload[:byte_length]
            buffer = self.ctx.doc.create_buffer()
            buffer.set(
                BufferWeight(
                    name=_name(item),
                    uri=None if is_data_uri(uri) else uri,
                    data=bytes(payload),
                    extras=_extras(item),
                )
            )
            handles.append(buffer)
        self.ctx.entities["buffers"] = handles

    def _buffer_data(self) -> List[bytes]:
        return [buffer.get().data for buffer in self.ctx.entities["buffers"]]

    def _view_buffer(self, view_index: Any):
        view = lookup(self.ctx.items("bufferViews"), view_index, "bufferViews")
        return lookup(self.ctx.entities["buffers"], view.get("buffer"), "buffers")

    def import_accessors(self) -> None:
        views = self.ctx.items("bufferViews")
        data = self._buffer_data()
        handles = []
        for item in self._objects("accessors"):
            payload = read_accessor(item, views, data)
            component, element = accessor_types(item)
            accessor = self.ctx.doc.create_accessor()
            accessor.set(
                AccessorWeight(
                    name=_name(item),
                    component_type=component,
                    element_type=element,
                    normalized=bool(item.get("normalized", False)),
                    data=payload,
                    extras=_extras(item),
                )
            )
            view_index = item.get("bufferView")
            if view_index is None and isinstance(item.get("sparse"), dict):
                view_index = item["sparse"].get("values", {}).get("bufferView")
            if view_index is not None:
                accessor.set_buffer(self._view_buffer(view_index))
            handles.append(accessor)
        self.ctx.entities["accessors"] = handles

    def import_images(self) -> None:
        views = self.ctx.items("bufferViews")
        data = self._buffer_data()
        handles = []
        for position, item in enumerate(self._objects("images")):
            mime_type = item.get("mimeType")
            uri = item.get("uri")
            buffer = None
            if "bufferView" in item:
                view = lookup(views, item["bufferView"], "bufferViews")
                payload = read_buffer_view(view, data)
                buffer = self._view_buffer(item["bufferView"])
                uri = None
            else:
                payload = self.image_payloads[position]
                if payload is None:
                    self.ctx.events.warn(
                        f"image {position} could not be resolved; leaving it empty",
                        stage="images",
                        uri=None if is_data_uri(uri) else uri,
                    )
                    payload = b""
                mime_type = mime_type or data_uri_mime_type(uri)
                if is_data_uri(uri):
                    uri = None
            image = self.ctx.doc.create_image()
            image.set(
                ImageWeight(
                    name=_name(item),
                    uri=uri,
                    mime_type=mime_type,
                    data=bytes(payload),
                    extras=_extras(item),
                )
            )
            if buffer is not None:
                image.set_buffer(buffer)
            handles.append(image)
        self.ctx.entities["images"] = handles

    def _sampler(self, index: Any) -> Optional[Dict[str, Any]]:
        samplers = self.ctx.items("samplers")
        if is_index(index) and 0 <= index < len(samplers) and isinstance(samplers[index], dict):
            return samplers[index]
        if self.ctx.options.strict:
            raise InvalidIndexError("samplers", index, len(samplers))
        self.ctx.events.warn(f"skipping reference to samplers[{index!r}]", stage="textures")
        return None

    def import_textures(self) -> None:
        handles = []
        for item in self._objects("textures"):
            weight = TextureWeight(name=_name(item), extras=_extras(item))
            if item.get("sampler") is not None:
                sampler = self._sampler(item["sampler"])
                if sampler is not None:
                    weight.mag_filter = self._enum(MagFilter, sampler.get("magFilter"), None, stage="textures")
                    weight.min_filter = self._enum(MinFilter, sampler.get("minFilter"), None, stage="textures")
                    weight.wrap_s = self._enum(
                        WrappingMode, sampler.get("wrapS"), WrappingMode.REPEAT, stage="textures"
                    )
                    weight.wrap_t = self._enum(
                        WrappingMode, sampler.get("wrapT"), WrappingMode.REPEAT, stage="textures"
                    )
            texture = self.ctx.doc.create_texture()
            texture.set(weight)
            if item.get("source") is not None:
                texture.set_image(self.ctx.resolve("images", item["source"], stage="textures"))
            handles.append(texture)
        self.ctx.entities["textures"] = handles

    def import_materials(self) -> None:
        handles = []
        stage = "materials"
        for item in self._objects("materials"):
            pbr = item.get("pbrMetallicRoughness") or {}
            weight = MaterialWeight(
                name=_name(item),
                base_color_factor=self._vector(pbr, "baseColorFactor", (1.0, 1.0, 1.0, 1.0), stage=stage),
                metallic_factor=self._number(pbr, "metallicFactor", 1.0, stage=stage),
                roughness_factor=self._number(pbr, "roughnessFactor", 1.0, stage=stage),
                emissive_factor=self._vector(item, "emissiveFactor", (0.0, 0.0, 0.0), stage=stage),
                alpha_mode=self._enum(AlphaMode, item.get("alphaMode"), AlphaMode.OPAQUE, stage=stage),
                alpha_cutoff=self._number(item, "alphaCutoff", 0.5, stage=stage),
                double_sided=bool(item.get("doubleSided", False)),
                extras=_extras(item),
            )
            material = self.ctx.doc.create_material()
            material.set(weight)

            slots = (
                (TextureSlot.BASE_COLOR, pbr.get("baseColorTexture")),
                (TextureSlot.METALLIC_ROUGHNESS, pbr.get("metallicRoughnessTexture")),
                (TextureSlot.NORMAL, item.get("normalTexture")),
                (TextureSlot.OCCLUSION, item.get("occlusionTexture")),
                (TextureSlot.EMISSIVE, item.get("emissiveTexture")),
            )
            for slot, info in slots:
                if not isinstance(info, dict):
                    continue
                texture = self.ctx.resolve("textures", info.get("index"), stage=stage)
                if texture is None:
                    continue
                tex_coord = info.get("texCoord", 0)
                material.set_texture(slot, texture, tex_coord=tex_coord if is_index(tex_coord) else 0)
                if slot is TextureSlot.NORMAL:
                    weight.normal_scale = self._number(info, "scale", 1.0, stage=stage)
                elif slot is TextureSlot.OCCLUSION:
                    weight.occlusion_strength = self._number(info, "strength", 1.0, stage=stage)
            handles.append(material)
        self.ctx.entities["materials"] = handles

    def import_meshes(self) -> None:
        handles = []
        stage = "meshes"
        for position, item in enumerate(self._objects("meshes")):
            mesh = self.ctx.doc.create_mesh()
            mesh.set(
                MeshWeight(
                    name=_name(item),
                    weights=self._weights(item.get("weights"), stage=stage),
                    extras=_extras(item),
                )
            )
            for primitive_json in item.get("primitives") or []:
                if not isinstance(primitive_json, dict):
                    self._fail_or_warn(f"mesh {position} has a malformed primitive", stage=stage)
                    continue
                self._import_primitive(mesh, primitive_json)
            handles.append(mesh)
        self.ctx.entities["meshes"] = handles

    def _import_primitive(self, mesh, item: Dict[str, Any]) -> None:
        stage = "meshes"
        primitive = mesh.create_primitive()
        primitive.set(
            PrimitiveWeight(
                mode=self._enum(PrimitiveMode, item.get("mode"), PrimitiveMode.TRIANGLES, stage=stage),
                extras=_extras(item),
            )
        )
        attributes = item.get("attributes") or {}
        for semantic in sorted(attributes):
            accessor = self.ctx.resolve("accessors", attributes[semantic], stage=stage)
            if accessor is not None:
                primitive.set_attribute(semantic, accessor)

        if item.get("indices") is not None:
            accessor = self.ctx.resolve("accessors", item["indices"], stage=stage)
            if accessor is not None:
                if is_index_accessor(accessor):
                    primitive.set_indices(accessor)
                else:
                    self._fail_or_warn(
                        f"accessor {item['indices']} cannot be used as primitive indices", stage=stage
                    )

        if item.get("material") is not None:
            primitive.set_material(self.ctx.resolve("materials", item["material"], stage=stage))

        for target_json in item.get("targets") or []:
            if not isinstance(target_json, dict):
                self._fail_or_warn("morph target must be a JSON object", stage=stage)
                continue
            target = primitive.create_morph_target()
            for semantic in sorted(target_json):
                if semantic not in Semantic.MORPH_TARGET:
                    self._fail_or_warn(f"morph target attribute {semantic!r} is not supported", stage=stage)
                    continue
                accessor = self.ctx.resolve("accessors", target_json[semantic], stage=stage)
                if accessor is not None:
                    target.set_attribute(semantic, accessor)

    def _node_weight(self, item: Dict[str, Any]) -> NodeWeight:
        stage = "nodes"
        weight = NodeWeight(
            name=_name(item),
            weights=self._weights(item.get("weights"), stage=stage),
            extras=_extras(item),
        )
        matrix = item.get("matrix")
        if matrix is not None:
            if isinstance(matrix, list) and len(matrix) == 16 and all(map(_is_number, matrix)):
                weight.translation, weight.rotation, weight.scale = decompose_matrix(matrix)
                return weight
            self._fail_or_warn("matrix must be a list of 16 numbers", stage=stage)
        weight.translation = self._vector(item, "translation", (0.0, 0.0, 0.0), stage=stage)
        weight.rotation = self._vector(item, "rotation", (0.0, 0.0, 0.0, 1.0), stage=stage)
        weight.scale = self._vector(item, "scale", (1.0, 1.0, 1.0), stage=stage)
        return weight

    def import_nodes(self) -> None:
        items = self._objects("nodes")
        handles: List[Node] = []
        for item in items:
            node = self.ctx.doc.create_node()
            node.set(self._node_weight(item))
            handles.append(node)
        self.ctx.entities["nodes"] = handles

        for node, item in zip(handles, items):
            if item.get("mesh") is not None:
                node.set_mesh(self.ctx.resolve("meshes", item["mesh"], stage="nodes"))

        for node, item in zip(handles, items):
            for child_index in item.get("children") or []:
                child = self.ctx.resolve("nodes", child_index, stage="nodes")
                if child is None:
                    continue
                if child.parent() is not None or _is_ancestor(child, node):
                    self._fail_or_warn(
                        f"node {child_index} cannot be a child of node {handles.index(node)}",
                        stage="nodes",
                    )
                    continue
                node.add_child(child)

    def import_scenes(self) -> None:
        handles = []
        for item in self._objects("scenes"):
            scene = self.ctx.doc.create_scene()
            scene.set(SceneWeight(name=_name(item), extras=_extras(item)))
            for node_index in item.get("nodes") or []:
                node = self.ctx.resolve("nodes", node_index, stage="scenes")
                if node is not None:
                    scene.add_node(node)
            handles.append(scene)
        self.ctx.entities["scenes"] = handles

        if self.ctx.json.get("scene") is not None:
            self.ctx.doc.set_default_scene(self.ctx.resolve("scenes", self.ctx.json["scene"], stage="scenes"))

    def import_skins(self) -> None:
        handles = []
        stage = "skins"
        for position, item in enumerate(self._objects("skins")):
            skin = self.ctx.doc.create_skin()
            skin.set(SkinWeight(name=_name(item), extras=_extras(item)))
            if item.get("inverseBindMatrices") is not None:
                skin.set_inverse_bind_matrices(
                    self.ctx.resolve("accessors", item["inverseBindMatrices"], stage=stage)
                )
            joints = [self.ctx.resolve("nodes", index, stage=stage) for index in item.get("joints") or []]
            skin.set_joints(joint for joint in joints if joint is not None)
            if len(joints) > self.ctx.options.max_joints:
                self.ctx.events.warn(
                    f"skin {position} has {len(joints)} joints, more than the supported "
                    f"{self.ctx.options.max_joints}",
                    stage=stage,
                    target_ids=[skin.index],
                )
            if item.get("skeleton") is not None:
                skin.set_skeleton(self.ctx.resolve("nodes", item["skeleton"], stage=stage))
            handles.append(skin)
        self.ctx.entities["skins"] = handles

        for node, item in zip(self.ctx.entities["nodes"], self._objects("nodes")):
            if item.get("skin") is not None:
                node.set_skin(self.ctx.resolve("skins", item["skin"], stage=stage))

    def import_animations(self) -> None:
        handles = []
        stage = "animations"
        for item in self._objects("animations"):
            animation = self.ctx.doc.create_animation()
            animation.set(AnimationWeight(name=_name(item), extras=_extras(item)))

            samplers: List[AnimationSampler] = []
            for sampler_json in item.get("samplers") or []:
                sampler_json = sampler_json if isinstance(sampler_json, dict) else {}
                sampler = AnimationSampler.new(
                    self.ctx.store,
                    AnimationSamplerWeight(
                        interpolation=self._enum(
                            Interpolation,
                            sampler_json.get("interpolation"),
                            Interpolation.LINEAR,
                            stage=stage,
                        ),
                        extras=_extras(sampler_json),
                    ),
                )
                if sampler_json.get("input") is not None:
                    sampler.set_input(self.ctx.resolve("accessors", sampler_json["input"], stage=stage))
                if sampler_json.get("output") is not None:
                    sampler.set_output(self.ctx.resolve("accessors", sampler_json["output"], stage=stage))
                samplers.append(sampler)

            for channel_json in item.get("channels") or []:
                channel_json = channel_json if isinstance(channel_json, dict) else {}
                target = channel_json.get("target") or {}
                path = self._enum(TargetPath, target.get("path"), None, stage=stage)
                if path is None:
                    self._fail_or_warn("animation channel has no valid target path", stage=stage)
                    continue
                sampler_index = channel_json.get("sampler")
                if not (is_index(sampler_index) and 0 <= sampler_index < len(samplers)):
                    if self.ctx.options.strict:
                        raise InvalidIndexError("animation.samplers", sampler_index, len(samplers))
                    self.ctx.events.warn(
                        f"skipping channel with sampler reference {sampler_index!r}", stage=stage
                    )
                    continue
                channel = animation.create_channel()
                channel.set(AnimationChannelWeight(path=path, extras=_extras(channel_json)))
                channel.set_sampler(samplers[sampler_index])
                if target.get("node") is not None:
                    channel.set_target(self.ctx.resolve("nodes", target["node"], stage=stage))
            handles.append(animation)
        self.ctx.entities["animations"] = handles

    def import_extensions(self) -> None:
        for name in sorted(self._extension_names()):
            if name not in self.registry:
                self.ctx.events.warn(f"ignoring unregistered extension {name}", stage="extensions")
        self.registry.import_all(self.ctx)

    def _extension_names(self) -> set:
        names = set()
        for key in ("extensionsUsed", "extensionsRequired"):
            value = self.ctx.json.get(key) or []
            names.update(name for name in value if isinstance(name, str))
        names.update(self.ctx.json.get("extensions") or {})
        for collection in ENTITY_COLLECTIONS:
            for item in self.ctx.items(collection):
                if isinstance(item, dict) and isinstance(item.get("extensions"), dict):
                    names.update(item["extensions"])
        return names


def _is_ancestor(candidate: Node, node: Node) -> bool:
    current: Optional[Node] = node
    while current is not None:
        if current == candidate:
            return True
        current = current.parent()
    return False


async def import_gltf(
    store: GraphStore,
    format: GltfFormat,
    resolver: Optional[Resolver] = None,
    *,
    registry: Optional[ExtensionRegistry] = None,
    events: Optional[EventBus] = None,
    options: Optional[ImportOptions] = None,
) -> Document:
    """Build a document in ``store`` from ``format`` and return its handle.

    Buffer payloads are taken, in order, from the sole resource when there is
    exactly one buffer and one resource, from a resource keyed by the buffer
    URI, from a data URI, or from ``resolver``. Unresolved payloads are left
    empty and reported on ``events``.
    """

    if not isinstance(format.json, dict):
        raise FormatError("glTF root must be a JSON object")
    ctx = ImportContext(
        store=store,
        doc=Document.new(store),
        json=format.json,
        events=events if events is not None else EventBus(),
        options=options if options is not None else ImportOptions.from_env(),
    )
    importer = _Importer(
        ctx,
        dict(format.resources),
        resolver,
        registry if registry is not None else default_registry(),
    )

    LOGGER.debug("Importing glTF document into node %s", ctx.doc.index)
    importer.import_document()
    payloads = await importer.resolve_payloads()
    importer.import_buffers(payloads)
    importer.import_accessors()
    importer.import_images()
    importer.import_textures()
    importer.import_materials()
    importer.import_meshes()
    importer.import_nodes()
    importer.import_scenes()
    importer.import_skins()
    importer.import_animations()
    importer.import_extensions()
    return ctx.doc


__all__ = ["import_gltf"]
