TEAM_PALETTE = (
    "#4F46E5",  # indigo-600
    "#EC4899",  # pink-600
    "#10B981",  # emerald-600
    "#F59E0B",  # amber-500
    "#3B82F6",  # blue-500
    "#8B5CF6",  # violet-500
    "#EF4444",  # red-500
    "#14B8A6",  # teal-500
    "#F97316",  # orange-500
    "#6366F1",  # indigo-500
)

NO_TEAM_COLOR = "#94a3b8"


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def team_hash(team_id: str) -> int:
    """
    Polynomial string hash: hash = ord(c) + ((hash << 5) - hash).

    The shift wraps to a signed 32-bit integer, matching the colours the
    browser grid has always shown for existing team ids.
    """
    hash_value = 0
    for char in team_id:
        shifted = _to_int32(_to_int32(hash_value) << 5)
        hash_value = ord(char) + (shifted - hash_value)
    return hash_value


def team_color(team_id: str) -> str:
    return TEAM_PALETTE[abs(team_hash(team_id)) % len(TEAM_PALETTE)]
