# Settings for the park simulation

# Money a fresh park starts with.
STARTING_MONEY = 10000

# Slots unlocked at the start and the hard cap before perk bonuses.
STARTING_SLOTS = 4
MAX_SLOTS = 12

# Cost to unlock each slot past the starting ones, indexed by
# (next slot number - STARTING_SLOTS - 1). Entries past MAX_SLOTS are
# only reachable through perk bonuses.
SLOT_UNLOCK_COSTS = [
    15000,   # Slot 5
    25000,   # Slot 6
    40000,   # Slot 7
    60000,   # Slot 8
    90000,   # Slot 9
    130000,  # Slot 10
    180000,  # Slot 11
    250000,  # Slot 12
    320000,  # Slot 13
    400000,  # Slot 14
]

# Upgrade scaling. Stats grow faster than upkeep.
MAX_LEVEL = 10
UPGRADE_COST_MULTIPLIER = 1.15
STAT_LEVEL_MULTIPLIER = 1.1
MAINTENANCE_LEVEL_MULTIPLIER = 1.05

# Share of total investment returned when a building is demolished.
DEMOLISH_REFUND_RATE = 0.5

# Ticket pricing
TICKET_PRICE_MIN = 5
TICKET_PRICE_MAX = 500
TICKET_PRICE_STEP = 5
DEFAULT_TICKET_PRICE = 50

# (price, demand) points of the demand curve, ascending by price.
DEMAND_CURVE = [
    (5, 1.0),
    (25, 0.85),
    (50, 0.70),
    (100, 0.50),
    (200, 0.30),
    (500, 0.05),
]
DEMAND_FLOOR = 0.05

# Guests
GUESTS_PER_SLOT = 50
GUEST_ARRIVAL_RATE = 0.1   # fraction of the gap to target closed per second
GUEST_DEPARTURE_RATE = 0.02  # fraction of guests leaving per second
UNHAPPY_LEAVE_RATE = 0.05  # extra departures per second at zero satisfaction

# Weights of the four needs in overall satisfaction; must sum to 1.
SATISFACTION_WEIGHTS = {
    "entertainment": 0.4,
    "hunger": 0.2,
    "comfort": 0.2,
    "safety": 0.2,
}

# Offline progress
SATISFACTION_THRESHOLD = 0.8
OFFLINE_GROWTH_CEILING = 1.2

# Duration of one real-time tick and of the auto-save period, in seconds
TICK_SECONDS = 0.1
AUTO_SAVE_SECONDS = 30
