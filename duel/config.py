"""Configuration constants for the duel engine."""

# Timers
QUESTION_TIMER_SECONDS = 21        # Answering window per classic question
TRANSITION_COUNTDOWN_SECONDS = 5   # Reveal + countdown between questions

# Difficulty distribution (classic mode, "easy" preset)
DIFFICULTY_RATIO_EASY = 0.5
DIFFICULTY_RATIO_MEDIUM = 0.3
DIFFICULTY_RATIO_HARD = 0.2

# Scoring
POINTS_EASY = 1
POINTS_MEDIUM = 2
POINTS_HARD = 3
HINT_PROVIDER_BONUS = 1   # Awarded to the hint giver when the requester answers correctly

# Distractors shown per difficulty level
WRONG_COUNT_EASY = 3
WRONG_COUNT_MEDIUM = 4
WRONG_COUNT_HARD = 5
HARD_MODE_NONE_CHANCE = 0.5   # Chance "None of the above" is the correct option on hard questions

# Pool & progression (solo-style mode)
INITIAL_POOL_RATIO = 0.4        # Share of the word list active at the start
POOL_EXPANSION_THRESHOLD = 0.65 # Share of active words answered at level 2+ before expanding
POOL_EXPANSION_SIZE = 2         # Words moved from remaining to active per expansion

# Level probabilities (solo-style mode)
LEVEL_1_START_PROBABILITY = 0.66
LEVEL_2_TYPING_PROBABILITY = 0.5
L1_TO_L2_PROBABILITY = 0.66
L2_STAY_PROBABILITY = 0.66
MAX_LEVEL = 3

# Hint system
HINT_TIME_BONUS_MS = 3000
MAX_LETTER_HINTS = 3
MAX_ELIMINATED_OPTIONS = 2

# Sabotage system
SABOTAGE_EFFECTS = ('sticky', 'bounce', 'trampoline', 'reverse')
MAX_SABOTAGES_PER_DUEL = 5
SABOTAGE_STICKY_DURATION_MS = 7000
SABOTAGE_FALLBACK_DURATION_MS = 25000

# PRNG
LCG_MULTIPLIER = 1103515245
LCG_INCREMENT = 12345
LCG_MODULUS = 0x7fffffff
SEED_XOR_MASK = 0xdeadbeef

# Background sweep
PENDING_DUEL_TTL_MS = 24 * 60 * 60 * 1000   # Unanswered challenges expire after a day

# Storage
MAX_TRANSACTION_RETRIES = 5

# Magic strings
NONE_OF_THE_ABOVE = 'None of the above'
TIMEOUT_ANSWER = '__TIMEOUT__'

# Roles, modes and statuses
CHALLENGER = 'challenger'
OPPONENT = 'opponent'
ROLES = (CHALLENGER, OPPONENT)

MODE_CLASSIC = 'classic'
MODE_SOLO_STYLE = 'solo-style'
MODES = (MODE_CLASSIC, MODE_SOLO_STYLE)

DIFFICULTY_PRESETS = ('easy', 'medium', 'hard')

ACTIVE_STATUSES = ('accepted', 'challenging')
TERMINAL_STATUSES = ('completed', 'stopped', 'cancelled', 'rejected')
