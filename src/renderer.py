"""Pygame viewer for the predator/prey world.

The renderer only reads World snapshots and collector samples. User input
(spawn, reset, clear, save) is handed back to the host loop as a
FrameInput so that every mutation of the world stays with the host.
"""

import pygame
from typing import List, Sequence, Tuple
from dataclasses import dataclass

from agent import AgentKind

Color = Tuple[int, int, int]

PREDATOR_LOW: Color = (139, 0, 0)       # Dark red
PREDATOR_HIGH: Color = (255, 69, 0)     # Bright orange-red
PREY_LOW: Color = (0, 100, 0)           # Dark green
PREY_HIGH: Color = (144, 238, 144)      # Light green
GRAPH_PREDATOR: Color = (220, 20, 60)
GRAPH_PREY: Color = (34, 139, 34)


@dataclass
class RenderConfig:
    """Configuration for renderer."""
    width: int
    height: int
    fullscreen: bool = False
    target_fps: int = 30
    show_stats: bool = True
    stats_panel_height: int = 140

    # Colors
    background_color: Color = (20, 25, 35)

    # Agent rendering
    agent_radius: int = 3

    # Energy that maps to the brightest color
    full_energy: float = 150.0

    # Agents added per spawn key press
    spawn_batch: int = 10


@dataclass
class FrameInput:
    """What the user asked for during one frame."""
    running: bool = True
    paused: bool = False
    save_requested: bool = False
    spawn_predators: int = 0
    spawn_prey: int = 0
    reset_requested: bool = False
    clear_requested: bool = False


def lerp_color(low: Color, high: Color, factor: float) -> Color:
    """Interpolate between two colors (factor clamped to [0, 1])."""
    factor = max(0.0, min(1.0, factor))
    return tuple(int(a * (1.0 - factor) + b * factor) for a, b in zip(low, high))


def energy_color(factor: float, kind: AgentKind) -> Color:
    """Agent color from its energy fraction: dim when starving, bright when fed."""
    if kind is AgentKind.PREDATOR:
        return lerp_color(PREDATOR_LOW, PREDATOR_HIGH, factor)
    return lerp_color(PREY_LOW, PREY_HIGH, factor)


def population_graph_points(
    samples: Sequence,
    rect: Tuple[int, int, int, int]
) -> Tuple[List[Tuple[float, float]], List[Tuple[float, float]]]:
    """Polyline points for predator and prey counts inside rect.

    Args:
        samples: StatisticsSample sequence, oldest first
        rect: (left, top, width, height) of the graph area

    Returns:
        (predator_points, prey_points), empty when there are no samples
    """
    if not samples:
        return [], []

    left, top, width, height = rect
    bottom = top + height
    max_count = max(1, max(max(s.predator_count, s.prey_count) for s in samples))
    y_scale = height / max_count
    x_scale = width / (len(samples) - 1) if len(samples) > 1 else 0.0

    predator_points = []
    prey_points = []
    for i, sample in enumerate(samples):
        x = left + i * x_scale
        predator_points.append((x, bottom - sample.predator_count * y_scale))
        prey_points.append((x, bottom - sample.prey_count * y_scale))
    return predator_points, prey_points


class Renderer:
    """Draws the world and a live population graph."""

    def __init__(self, config: RenderConfig):
        """Initialize renderer.

        Args:
            config: Rendering configuration
        """
        pygame.init()

        self.config = config

        # Set up display
        flags = pygame.FULLSCREEN if config.fullscreen else 0

        # Add space for stats panel at bottom
        display_height = config.height + config.stats_panel_height if config.show_stats else config.height
        self.screen = pygame.display.set_mode((config.width, display_height), flags)
        pygame.display.set_caption("Predator-Prey Ecosystem")

        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 24)
        self.small_font = pygame.font.Font(None, 18)

        # Pause state
        self._paused = False

    def render(self, world, collector) -> FrameInput:
        """Render a single frame and collect user input.

        Args:
            world: World to draw
            collector: StatisticsCollector feeding the graph

        Returns:
            FrameInput with the requests made this frame
        """
        frame = self._handle_events()
        if not frame.running:
            return frame

        # Clear screen
        self.screen.fill(self.config.background_color)

        # Draw agents
        self._draw_agents(world)

        # Draw stats overlay
        if self.config.show_stats:
            self._draw_stats(world, collector)

        # Flip display
        pygame.display.flip()
        self.clock.tick(self.config.target_fps)

        return frame

    def _handle_events(self) -> FrameInput:
        frame = FrameInput(paused=self._paused)
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                frame.running = False
                return frame
            if event.type != pygame.KEYDOWN:
                continue
            if event.key == pygame.K_ESCAPE:
                frame.running = False
                return frame
            elif event.key == pygame.K_SPACE:
                self._paused = not self._paused
            elif event.key == pygame.K_s:
                frame.save_requested = True
            elif event.key == pygame.K_p:
                frame.spawn_predators += self.config.spawn_batch
            elif event.key == pygame.K_o:
                frame.spawn_prey += self.config.spawn_batch
            elif event.key == pygame.K_r:
                frame.reset_requested = True
            elif event.key == pygame.K_c:
                frame.clear_requested = True
        frame.paused = self._paused
        return frame

    def _draw_agents(self, world):
        """Draw every agent, colored by kind and energy."""
        scale_x = self.config.width / world.parameters.width
        scale_y = self.config.height / world.parameters.height
        for agent in world.agents():
            color = energy_color(agent.energy / self.config.full_energy, agent.kind)
            pygame.draw.circle(
                self.screen, color,
                (int(agent.position.x * scale_x), int(agent.position.y * scale_y)),
                self.config.agent_radius
            )

    def _draw_stats(self, world, collector):
        """Draw statistics panel with population graph."""
        ui_y = self.config.height
        panel_height = self.config.stats_panel_height
        pygame.draw.rect(self.screen, (30, 30, 40), (0, ui_y, self.config.width, panel_height))

        aggregates = collector.aggregates()
        stats_text = [
            f"Tick: {world.tick_count()}",
            f"Predators: {world.predator_count()}",
            f"Prey: {world.prey_count()}",
            f"Peak Predators: {aggregates.peak_predators}",
            f"Peak Prey: {aggregates.peak_prey}",
            f"Avg Pred Energy: {aggregates.average_predator_energy:.1f}",
        ]

        # Draw stats in columns
        x_offset = 10
        y_offset = ui_y + 10
        for i, text in enumerate(stats_text):
            if i == 3:  # Start second column
                x_offset = 160
                y_offset = ui_y + 10
            surface = self.small_font.render(text, True, (200, 200, 200))
            self.screen.blit(surface, (x_offset, y_offset))
            y_offset += 20

        # Population graph on the right half of the panel
        graph_rect = (self.config.width // 2, ui_y + 10, self.config.width // 2 - 20, panel_height - 20)
        pygame.draw.rect(self.screen, (45, 45, 60), graph_rect)
        predator_points, prey_points = population_graph_points(collector.snapshot(), graph_rect)
        if len(predator_points) > 1:
            pygame.draw.lines(self.screen, GRAPH_PREDATOR, False, predator_points, 2)
            pygame.draw.lines(self.screen, GRAPH_PREY, False, prey_points, 2)

        # Instructions
        instructions = "SPACE: Pause | P/O: Spawn Pred/Prey | R: Reset | C: Clear | S: Save | ESC: Quit"
        surface = self.small_font.render(instructions, True, (200, 200, 200))
        self.screen.blit(surface, (10, ui_y + panel_height - 24))

        # Pause indicator
        if self._paused:
            pause_text = self.font.render("PAUSED", True, (255, 255, 0))
            self.screen.blit(pause_text, (10, ui_y + 75))

    def close(self):
        """Clean up pygame."""
        pygame.quit()
