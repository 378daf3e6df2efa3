from .miner import MiningResult, check_difficulty, mine, satisfies_difficulty

__all__ = ["MiningResult", "check_difficulty", "mine", "satisfies_difficulty"]
