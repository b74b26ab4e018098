# renderer.py
import moderngl
import numpy as np
import pygame

from verlet_net.types import VIEW

LINE_VERT = """
#version 330
uniform mat4 u_proj;
in vec2 in_position;
void main() {
    gl_Position = u_proj * vec4(in_position, 0.0, 1.0);
}
"""

LINE_FRAG = """
#version 330
uniform vec3 u_color;
out vec4 f_color;
void main() {
    f_color = vec4(u_color, 1.0);
}
"""

UI_VERT = """
#version 330
in vec2 in_pos;
in vec2 in_uv;
out vec2 v_uv;
void main() {
    v_uv = in_uv;
    gl_Position = vec4(in_pos, 0.0, 1.0);
}
"""

UI_FRAG = """
#version 330
uniform sampler2D u_texture;
in vec2 v_uv;
out vec4 f_color;
void main() {
    f_color = texture(u_texture, v_uv);
}
"""

BACKGROUND = (0.0, 0.0, 0.0, 1.0)
LINE_COLOR = (1.0, 1.0, 1.0)

# ------------------------
# Matrix helpers
# ------------------------


def ortho(width: float, height: float) -> VIEW:
    """Pixel space to clip space, origin top-left and y pointing down like a canvas."""
    return np.array(
        [
            [2.0 / width, 0.0, 0.0, -1.0],
            [0.0, -2.0 / height, 0.0, 1.0],
            [0.0, 0.0, 1.0, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ],
        dtype=np.float32,
    ).T


# ------------------------
# Renderer
# ------------------------


class Renderer:
    """``LineEmitter`` that strokes the net with moderngl."""

    def __init__(self, ctx: moderngl.Context, width: int = 1100, height: int = 1100):
        self.ctx = ctx
        self.width = width
        self.height = height

        pygame.font.init()
        self.font = pygame.font.SysFont("monospace", 18)

        self.prog = self.ctx.program(vertex_shader=LINE_VERT, fragment_shader=LINE_FRAG)
        self.prog["u_proj"].write(ortho(width, height).tobytes())  # type: ignore
        self.prog["u_color"].value = LINE_COLOR  # type: ignore

        self.ui_prog = self.ctx.program(vertex_shader=UI_VERT, fragment_shader=UI_FRAG)
        self.ui_vbo = self.ctx.buffer(reserve=4 * 4 * 4)
        self.ui_vao = self.ctx.vertex_array(
            self.ui_prog,
            [(self.ui_vbo, "2f 2f", "in_pos", "in_uv")],
        )
        self.ui_texture: moderngl.Texture | None = None

        # Grown on demand in stroke_all
        self.vbo = self.ctx.buffer(reserve=1024, dynamic=True)
        self.vao = self.ctx.vertex_array(self.prog, [(self.vbo, "2f", "in_position")])

        self._vertices: list[float] = []
        self._cursor: tuple[float, float] | None = None

    # ------------------------
    # LineEmitter
    # ------------------------

    def clear(self) -> None:
        self.ctx.clear(*BACKGROUND)

    def begin_frame(self) -> None:
        self._vertices = []
        self._cursor = None

    def move_to(self, x: float, y: float) -> None:
        self._cursor = (x, y)

    def line_to(self, x: float, y: float) -> None:
        if self._cursor is None:
            raise RuntimeError("line_to() called before move_to()")
        x0, y0 = self._cursor
        self._vertices.extend((x0, y0, x, y))
        self._cursor = (x, y)

    def stroke_all(self, line_width: float) -> None:
        if not self._vertices:
            return
        data = np.array(self._vertices, dtype="f4").tobytes()
        if len(data) > self.vbo.size:
            self.vbo.orphan(len(data))
        self.vbo.write(data)

        self.ctx.line_width = line_width
        self.vao.render(mode=moderngl.LINES, vertices=len(self._vertices) // 2)

    # ------------------------
    # UI Overlay
    # ------------------------

    def _surface_to_texture(self, surface: pygame.Surface) -> moderngl.Texture:
        surface = pygame.transform.flip(surface, False, True)
        data = pygame.image.tobytes(surface, "RGBA", False)

        tex = self.ctx.texture(surface.get_size(), 4, data)
        tex.filter = (moderngl.NEAREST, moderngl.NEAREST)
        return tex

    def draw_overlay(self, lines: list[str]) -> None:
        self.ctx.enable(moderngl.BLEND)
        self.ctx.blend_func = moderngl.SRC_ALPHA, moderngl.ONE_MINUS_SRC_ALPHA

        line_h = self.font.get_height()
        w = max(self.font.size(line)[0] for line in lines)
        h = line_h * len(lines)

        surface = pygame.Surface((w, h), pygame.SRCALPHA)
        y = 0
        for line in lines:
            surface.blit(self.font.render(line, True, (200, 200, 200)), (0, y))
            y += line_h

        if self.ui_texture:
            self.ui_texture.release()
        self.ui_texture = self._surface_to_texture(surface)
        self.ui_texture.use(0)

        # Top-left quad in NDC
        margin = 10
        x0 = -1.0 + 2.0 * margin / self.width
        y0 = 1.0 - 2.0 * margin / self.height
        x1 = x0 + 2.0 * w / self.width
        y1 = y0 - 2.0 * h / self.height

        quad = np.array(
            [x0, y0, 0.0, 1.0, x0, y1, 0.0, 0.0, x1, y0, 1.0, 1.0, x1, y1, 1.0, 0.0],
            dtype="f4",
        )
        self.ui_vbo.write(quad.tobytes())
        self.ui_prog["u_texture"].value = 0  # type: ignore
        self.ui_vao.render(mode=moderngl.TRIANGLE_STRIP)
        self.ctx.disable(moderngl.BLEND)
