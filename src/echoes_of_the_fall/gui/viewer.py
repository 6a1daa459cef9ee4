"""
Viewer: a plain top-down pygame front end.

Draws the tiles of whichever grid is in view (revealed outdoor tiles or
the current building interior), units, raiders, highlights, the card hand
and recent messages. Input is forwarded to the Game as intents; the
viewer holds no game rules of its own.
"""

from typing import List, Optional, Tuple

import pygame

from echoes_of_the_fall.config import FPS, SCREEN_HEIGHT, SCREEN_WIDTH, TILE_SIZE
from echoes_of_the_fall.core.state import ViewMode
from echoes_of_the_fall.engine.game import Game

COLORS = {
    "background": (12, 12, 14),
    "fog": (20, 20, 24),
    "unit": (68, 136, 255),
    "selected": (255, 230, 90),
    "enemy": (210, 60, 50),
    "move": (80, 200, 120),
    "attack": (230, 80, 60),
    "building": (120, 100, 90),
    "road": (70, 70, 74),
    "prop": (40, 40, 40),
    "furniture": (150, 110, 70),
    "text": (225, 225, 215),
    "panel": (30, 30, 34),
}

PAN_SPEED = 12.0                     # Tiles per second
CARD_KEYS = (pygame.K_z, pygame.K_x, pygame.K_c, pygame.K_v,
             pygame.K_b, pygame.K_n, pygame.K_m)
ACTION_KEYS = (pygame.K_1, pygame.K_2, pygame.K_3, pygame.K_4, pygame.K_5,
               pygame.K_6, pygame.K_7, pygame.K_8, pygame.K_9)
MESSAGE_LINES = 6
PANEL_HEIGHT = 150


class Viewer:
    def __init__(self, game: Game):
        pygame.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        pygame.display.set_caption("Echoes of the Fall")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("Consolas", 14)
        self.font_small = pygame.font.SysFont("Consolas", 11)

        self.game = game
        self.log: List[str] = []
        self.cam_x = 0.0
        self.cam_y = 0.0
        self.center_on_party()

    # ------------------------------------------------------------------
    # Camera
    # ------------------------------------------------------------------

    @property
    def view_tiles(self) -> Tuple[int, int]:
        return SCREEN_WIDTH // TILE_SIZE + 1, (SCREEN_HEIGHT - PANEL_HEIGHT) // TILE_SIZE + 1

    def center_on_party(self) -> None:
        state = self.game.state
        if state.view_mode is ViewMode.INDOOR:
            interior = state.current_interior
            cx, cy = interior.width / 2, interior.height / 2
        else:
            units = self.game.interactions.units_in_view() or state.unit_list
            if not units:
                return
            cx = sum(u.x for u in units) / len(units)
            cy = sum(u.y for u in units) / len(units)
        w, h = self.view_tiles
        self.cam_x, self.cam_y = cx - w / 2, cy - h / 2

    def screen_to_tile(self, sx: int, sy: int) -> Optional[Tuple[int, int]]:
        if sy >= SCREEN_HEIGHT - PANEL_HEIGHT:
            return None
        return int(sx // TILE_SIZE + self.cam_x), int(sy // TILE_SIZE + self.cam_y)

    def tile_rect(self, x: float, y: float) -> pygame.Rect:
        return pygame.Rect(int((x - self.cam_x) * TILE_SIZE), int((y - self.cam_y) * TILE_SIZE),
                           TILE_SIZE, TILE_SIZE)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        running = True
        mode = self.game.state.view_mode
        while running:
            dt = self.clock.tick(FPS) / 1000.0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    running = self._on_key(event.key)
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button in (1, 3):
                    tile = self.screen_to_tile(*event.pos)
                    if tile is not None:
                        self.game.tile_clicked(*tile, "left" if event.button == 1 else "right")

            self._pan(dt)
            self.game.update()
            self.log.extend(self.game.messages())
            self.log = self.log[-MESSAGE_LINES:]
            if self.game.state.view_mode is not mode:
                mode = self.game.state.view_mode
                self.center_on_party()
            self._draw_frame()
        pygame.quit()

    def _on_key(self, key: int) -> bool:
        if key == pygame.K_ESCAPE:
            return False
        if key == pygame.K_SPACE:
            self.game.end_turn_requested()
        elif key == pygame.K_h:
            self.center_on_party()
        elif key in CARD_KEYS:
            target = self._hovered_enemy_id()
            self.game.play_card(CARD_KEYS.index(key), target)
        elif key in ACTION_KEYS:
            tile = self.screen_to_tile(*pygame.mouse.get_pos())
            if tile is not None:
                actions = self.game.context_actions(*tile)
                index = ACTION_KEYS.index(key)
                if index < len(actions):
                    self.game.action_invoked(actions[index].action_id, *tile)
        return True

    def _hovered_enemy_id(self) -> Optional[int]:
        tile = self.screen_to_tile(*pygame.mouse.get_pos())
        if tile is None:
            return None
        view = self.game.tile_view(*tile)
        if view and view["occupant"].is_enemy:
            return view["occupant"].entity_id
        return None

    def _pan(self, dt: float) -> None:
        keys = pygame.key.get_pressed()
        step = PAN_SPEED * dt
        if keys[pygame.K_a]:
            self.cam_x -= step
        if keys[pygame.K_d]:
            self.cam_x += step
        if keys[pygame.K_w]:
            self.cam_y -= step
        if keys[pygame.K_s]:
            self.cam_y += step

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _draw_frame(self) -> None:
        self.screen.fill(COLORS["background"])
        self._draw_tiles()
        self._draw_highlights()
        self._draw_entities()
        self._draw_panel()
        pygame.display.flip()

    def _draw_tiles(self) -> None:
        state = self.game.state
        indoors = state.view_mode is ViewMode.INDOOR
        w, h = self.view_tiles
        x0, y0 = int(self.cam_x), int(self.cam_y)
        for y in range(y0, y0 + h + 1):
            for x in range(x0, x0 + w + 1):
                if not indoors and not state.fog.is_revealed(x, y):
                    continue
                view = self.game.tile_view(x, y)
                if view is None:
                    continue
                rect = self.tile_rect(x, y)
                pygame.draw.rect(self.screen, view["color"], rect)
                if indoors:
                    if view["furniture"]:
                        pygame.draw.rect(self.screen, COLORS["furniture"], rect.inflate(-8, -8))
                    continue
                if view["has_road"]:
                    pygame.draw.rect(self.screen, COLORS["road"], rect.inflate(-10, -10))
                if view["has_building"]:
                    pygame.draw.rect(self.screen, COLORS["building"], rect.inflate(-2, -2))
                elif view["props"]:
                    pygame.draw.circle(self.screen, COLORS["prop"], rect.center, TILE_SIZE // 6)

    def _draw_highlights(self) -> None:
        for tile in self.game.movement_highlights():
            pygame.draw.rect(self.screen, COLORS["move"], self.tile_rect(tile.x, tile.y), 1)
        for tile in self.game.attack_highlights():
            pygame.draw.rect(self.screen, COLORS["attack"], self.tile_rect(tile.x, tile.y), 2)

    def _draw_entities(self) -> None:
        state = self.game.state
        selected = state.selected_unit
        for unit in self.game.interactions.units_in_view():
            rect = self.tile_rect(unit.motion.current_x, unit.motion.current_y)
            pygame.draw.circle(self.screen, COLORS["unit"], rect.center, TILE_SIZE // 2 - 3)
            if unit is selected:
                pygame.draw.circle(self.screen, COLORS["selected"], rect.center,
                                   TILE_SIZE // 2 - 1, 2)
        if state.view_mode is ViewMode.INDOOR:
            return
        for enemy in state.enemy_list:
            if not state.fog.is_revealed(enemy.x, enemy.y):
                continue
            rect = self.tile_rect(enemy.motion.current_x, enemy.motion.current_y)
            pygame.draw.rect(self.screen, COLORS["enemy"], rect.inflate(-6, -6))

    def _draw_panel(self) -> None:
        state = self.game.state
        top = SCREEN_HEIGHT - PANEL_HEIGHT
        pygame.draw.rect(self.screen, COLORS["panel"], (0, top, SCREEN_WIDTH, PANEL_HEIGHT))

        res = state.resources
        header = (f"Turn {state.turn}  Phase {state.phase.name}  "
                  f"Scrap {res.scrap}  Med {res.medicine}  Food {res.food}  Water {res.water}")
        self._text(header, 10, top + 6)

        unit = state.selected_unit
        if unit is not None:
            self._text(f"{unit.name}: HP {unit.health:.0f}  AP {unit.action_points}/"
                       f"{unit.max_action_points}  H2O {unit.hydration:.0f}  "
                       f"Food {unit.nutrition:.0f}  RAD {unit.radiation_dose:.0f} "
                       f"(ARS {unit.ars_stage})", 10, top + 24)

        hand = "  ".join(f"[{pygame.key.name(CARD_KEYS[i]).upper()}] {c.name} ({c.cost})"
                         for i, c in enumerate(state.deck.hand))
        self._text(hand, 10, top + 42, small=True)

        tile = self.screen_to_tile(*pygame.mouse.get_pos())
        if tile is not None:
            actions = self.game.context_actions(*tile)
            menu = "  ".join(f"[{i + 1}] {a.label} ({a.cost} AP)" for i, a in enumerate(actions))
            self._text(menu, 10, top + 58, small=True)

        for i, line in enumerate(self.log):
            self._text(line, 10, top + 76 + i * 12, small=True)

        if state.game_over:
            banner = "VICTORY" if state.victory else "GAME OVER"
            self._text(banner, SCREEN_WIDTH // 2 - 40, top // 2)

    def _text(self, text: str, x: int, y: int, small: bool = False) -> None:
        font = self.font_small if small else self.font
        self.screen.blit(font.render(text, True, COLORS["text"]), (x, y))
