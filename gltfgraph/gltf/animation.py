"""Animation, channel and sampler handles."""
from __future__ import annotations

from typing import List, Optional

from gltfgraph.graph.handles import GraphNode
from gltfgraph.graph.model import (
    AnimationChannelWeight,
    AnimationSamplerWeight,
    AnimationWeight,
    EdgeType,
)

from .accessor import Accessor
from .node import Node


class AnimationSampler(GraphNode[AnimationSamplerWeight]):
    """Keyframe times (input) and values (output) with an interpolation mode."""

    __slots__ = ()

    WEIGHT = AnimationSamplerWeight

    def input(self) -> Optional[Accessor]:
        return self._find_edge_target(EdgeType.SAMPLER_INPUT, Accessor)

    def set_input(self, accessor: Optional[Accessor]) -> None:
        self._set_edge_target(EdgeType.SAMPLER_INPUT, accessor)

    def output(self) -> Optional[Accessor]:
        return self._find_edge_target(EdgeType.SAMPLER_OUTPUT, Accessor)

    def set_output(self, accessor: Optional[Accessor]) -> None:
        self._set_edge_target(EdgeType.SAMPLER_OUTPUT, accessor)


class AnimationChannel(GraphNode[AnimationChannelWeight]):
    """Binds a sampler to one property path of a target node."""

    __slots__ = ()

    WEIGHT = AnimationChannelWeight

    def sampler(self) -> Optional[AnimationSampler]:
        return self._find_edge_target(EdgeType.CHANNEL_SAMPLER, AnimationSampler)

    def set_sampler(self, sampler: Optional[AnimationSampler]) -> None:
        self._set_edge_target(EdgeType.CHANNEL_SAMPLER, sampler)

    def create_sampler(self) -> AnimationSampler:
        sampler = AnimationSampler.new(self.store)
        self.set_sampler(sampler)
        return sampler

    def target(self) -> Optional[Node]:
        return self._find_edge_target(EdgeType.CHANNEL_TARGET, Node)

    def set_target(self, node: Optional[Node]) -> None:
        self._set_edge_target(EdgeType.CHANNEL_TARGET, node)


class Animation(GraphNode[AnimationWeight]):
    __slots__ = ()

    WEIGHT = AnimationWeight

    def channels(self) -> List[AnimationChannel]:
        return self._edge_targets(EdgeType.ANIMATION_CHANNEL, AnimationChannel)

    def create_channel(self) -> AnimationChannel:
        return self._create_edge_target(EdgeType.ANIMATION_CHANNEL, AnimationChannel)

    def add_channel(self, channel: AnimationChannel) -> None:
        self._add_edge_target(EdgeType.ANIMATION_CHANNEL, channel)

    def remove_channel(self, channel: AnimationChannel) -> None:
        self._remove_edge_target(EdgeType.ANIMATION_CHANNEL, channel)

    def samplers(self) -> List[AnimationSampler]:
        """Distinct samplers used by this animation's channels, in channel order."""

        samplers: List[AnimationSampler] = []
        for channel in self.channels():
            sampler = channel.sampler()
            if sampler is not None and sampler not in samplers:
                samplers.append(sampler)
        return samplers
