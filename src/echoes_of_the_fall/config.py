"""
Echoes of the Fall: Global Configuration
"""

# --- Game ---
MAX_TURNS: int = 30                  # Surviving past this turn is a victory
STARTING_UNITS: int = 3
STARTING_AP: int = 3
STARTING_NAMES = ("Alex", "Jordan", "Casey")
STARTING_POSITIONS = ((0, 0), (1, 0), (0, 1))
DEFAULT_SEED: int = 42

# --- Cards ---
MAX_HAND_SIZE: int = 7
OPENING_HAND: int = 5
CARDS_PER_TURN: int = 2
DECK_COPIES: int = 2                 # Copies of each starter card

# --- Unit ---
MAX_HEALTH: int = 100
MAX_HYDRATION: int = 100
MAX_NUTRITION: int = 100
MAX_RADIATION: int = 100
BASE_MOVE_RANGE: int = 3             # Movement cost covered by one AP
HYDRATION_DECAY: int = 5             # Per turn
NUTRITION_DECAY: int = 3             # Per turn
UNIT_BASE_DAMAGE: int = 20

# --- Starvation / dehydration ---
THIRST_LOW: int = 20
THIRST_DAMAGE_LOW: int = 3
THIRST_DAMAGE_EMPTY: int = 10
HUNGER_LOW: int = 20
HUNGER_DAMAGE_LOW: int = 2
HUNGER_DAMAGE_EMPTY: int = 5

# --- Consumables ---
WATER_RESTORE: int = 30
FOOD_RESTORE: int = 25
MEDICINE_HEAL: int = 40

# --- Radiation ---
DOSE_PER_TURN: int = 10              # Full-turn dose at radiation level 1.0
MOVE_DOSE_FACTOR: float = 0.5        # Walking through contamination
ARS_THRESHOLDS = (25, 50, 75, 100)   # Dose needed for stages 1..4
ARS_DRAIN = {2: 5, 3: 10, 4: 20}     # HP lost per turn by stage

# --- Combat ---
BASE_DAMAGE: int = 20
DAMAGE_VARIANCE: int = 10
MISS_CHANCE: float = 0.1
MELEE_RANGE: float = 1.5

# --- Chunks ---
CHUNK_SIZE: int = 20
MAX_COORD: int = 10000               # Valid tiles: -MAX_COORD <= x, y < MAX_COORD
REVEAL_RADIUS: int = 6

# --- Noise ---
ELEVATION_SCALE: float = 0.1
MOISTURE_SCALE: float = 0.08
MOISTURE_OFFSET: float = 100.0
RADIATION_SCALE: float = 0.15
RADIATION_CUTOFF: float = 0.65       # Noise above this becomes contamination

# --- Urban generation ---
URBAN_ATTEMPTS: int = 4
URBAN_MARGIN: int = 3
PAVEMENT_CHANCE: float = 0.7
ROAD_CONNECTIONS: int = 2            # Nearest neighbours each building links to

# --- Enemies ---
ENEMY_SPAWN_INTERVAL: int = 3        # Spawn every N turns
ENEMY_SPAWN_ATTEMPTS: int = 50
ENEMY_SPAWN_MIN_DIST: float = 8.0
ENEMY_SPAWN_MAX_DIST: int = 14
RAIDER_HEALTH: int = 60
RAIDER_DAMAGE: int = 20
RAIDER_MOVE_RANGE: int = 2
RAIDER_ATTACK_RANGE: int = 1
RAIDER_SIGHT_RANGE: int = 6
FLEE_HEALTH_FRACTION: float = 0.2
ENEMY_SCRAP_DROP = (1, 5)

# --- Starting stockpile ---
STARTING_RESOURCES = {"scrap": 10, "medicine": 2, "food": 5, "water": 5}
LOW_WATER_WARNING: int = 3
LOW_FOOD_WARNING: int = 3

# --- Interiors ---
LOCKED_DOOR_CHANCE: float = 0.2
LOCKED_FURNITURE_CHANCE: float = 0.3
UNLOCK_DOOR_CHANCE: float = 0.5
UNLOCK_FURNITURE_CHANCE: float = 0.6

# --- Pathfinding ---
DIAGONAL_COST: float = 1.4
PATHFINDING_MAX_NODES: int = 4000    # Expansion cap for long searches

# --- Animation ---
MOVE_LERP_SPEED: float = 0.15        # Fraction of remaining distance per tick
MOVE_SNAP_DISTANCE: float = 0.01

# --- Persistence ---
SAVE_DIR: str = "saves"
DEFAULT_SAVE: str = "autosave.db"
SAVE_KEY: str = "echoesOfTheFall_save"
SAVE_VERSION: int = 1

# --- Logging ---
LOG_DIR: str = "logs"
LOG_LEVEL: str = "INFO"

# --- Display (viewer only) ---
SCREEN_WIDTH: int = 1280
SCREEN_HEIGHT: int = 800
FPS: int = 60
TILE_SIZE: int = 24
