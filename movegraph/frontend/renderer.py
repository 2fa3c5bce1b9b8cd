"""Draws a render pass onto a Pillow image.

This is the presentation side of the graph: it knows nothing about trees
or layout, only how to paint node and edge descriptors. Descriptor
positions are in graph pixel space, so every point is shifted by the
negated camera position to land in the viewport image.

Node shapes follow the graph's conventions: circles for moves, squares for
passes, diamonds for setup nodes. A hovered node gets a light outline.
"""

import math

from PIL import Image, ImageDraw

from ..engine.types import SHAPE_PASS, SHAPE_SETUP

CANVAS_BG = "#1e1e1e"
HOVER_OUTLINE = "#ffffff"


class GraphRenderer:
    """Renders node/edge descriptors to a viewport-sized Pillow image."""

    def __init__(self, grid_size, node_size, background=CANVAS_BG, scale=1):
        self.grid_size = grid_size
        self.node_size = node_size
        self.background = background
        self.scale = scale

    def _lw(self, base_width):
        """Scale a pixel width by the supersample factor."""
        return max(1, round(base_width * self.scale))

    def _to_px(self, point, camera_position):
        """Graph pixel coords -> image pixel coords."""
        cx, cy = camera_position
        return (
            (point[0] - cx) * self.scale,
            (point[1] - cy) * self.scale,
        )

    def render(self, render_pass, camera):
        w = max(1, int(camera.viewport_size[0] * self.scale))
        h = max(1, int(camera.viewport_size[1] * self.scale))
        img = Image.new("RGB", (w, h), self.background)
        draw = ImageDraw.Draw(img)

        # Edges first, in order: alternate lines under the current one
        for edge in render_pass.edges:
            pts = [
                self._to_px(p, camera.position)
                for p in edge.points(self.grid_size)
            ]
            draw.line(
                pts,
                fill=edge.stroke,
                width=self._lw(edge.stroke_width),
                joint="curve",
            )

        for node in render_pass.nodes:
            self._draw_node(draw, node, camera.position)
        return img

    def node_outline(self, shape, left, top):
        """Polygon (or bbox for circles) of a node centered at left/top."""
        n = self.node_size * self.scale
        if shape == SHAPE_SETUP:
            d = round(math.sqrt(2) * n)
            return [
                (left, top - d),
                (left - d, top),
                (left, top + d),
                (left + d, top),
            ]
        return [left - n, top - n, left + n, top + n]

    def _draw_node(self, draw, node, camera_position):
        left, top = self._to_px(node.position, camera_position)
        outline = HOVER_OUTLINE if node.hover else None
        width = self._lw(1)
        shape = self.node_outline(node.shape, left, top)
        if node.shape == SHAPE_SETUP:
            draw.polygon(shape, fill=node.fill, outline=outline, width=width)
        elif node.shape == SHAPE_PASS:
            draw.rectangle(shape, fill=node.fill, outline=outline, width=width)
        else:
            draw.ellipse(shape, fill=node.fill, outline=outline, width=width)


def render_graph(render_pass, camera, grid_size, node_size, supersample=4):
    """Render with supersampling, then downsample for smooth edges."""
    renderer = GraphRenderer(grid_size, node_size, scale=supersample)
    img = renderer.render(render_pass, camera)
    size = (
        max(1, int(camera.viewport_size[0])),
        max(1, int(camera.viewport_size[1])),
    )
    if supersample == 1:
        return img
    return img.resize(size, Image.Resampling.LANCZOS)
