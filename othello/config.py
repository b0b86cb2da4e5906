# othello/config.py
from dataclasses import dataclass, field, replace
from typing import Dict, Optional
import os
import tomllib  # python >=3.11


@dataclass(frozen=True)
class DifficultyConfig:
    name: str
    max_depth: int
    time_budget_ms: int
    random_override_probability: float = 0.0  # chance of a uniform random move / return
    use_return_optimization: bool = False  # pick return cells inside the search tree
    eval_jitter: Optional[float] = None  # material + random jitter instead of weighted eval


def default_difficulties() -> Dict[str, DifficultyConfig]:
    return {
        "easy": DifficultyConfig("easy", 2, 500, 1.0, False, eval_jitter=5.0),
        "normal": DifficultyConfig("normal", 4, 1000, 0.1, False),
        "hard": DifficultyConfig("hard", 6, 3000, 0.0, True),
    }


# Weights per game phase, keyed by heuristic term.
PHASE_WEIGHTS = {
    "opening": {"material": 0.5, "corner": 3.0, "edge": 1.0, "mobility": 2.0, "stability": 1.0},
    "midgame": {"material": 1.0, "corner": 2.5, "edge": 1.0, "mobility": 1.5, "stability": 1.5},
    "endgame": {"material": 2.0, "corner": 2.0, "edge": 1.0, "mobility": 0.5, "stability": 2.0},
}


@dataclass
class SearchConfig:
    default_difficulty: str = "normal"
    difficulties: Dict[str, DifficultyConfig] = field(default_factory=default_difficulties)
    deadline_check_interval: int = 256  # nodes between deadline checks inside a depth
    ai_move_delay_ms: int = 500  # advisory pause for presentation layers

    def difficulty(self, name: Optional[str] = None) -> DifficultyConfig:
        key = name or self.default_difficulty
        if key not in self.difficulties:
            raise KeyError(f"Unknown difficulty: {key}")
        return self.difficulties[key]


@dataclass
class EvalConfig:
    opening_fill: float = 0.3  # fill rate below this is the opening
    midgame_fill: float = 0.7  # fill rate below this is the midgame
    corner_value: int = 30
    edge_value: int = 5
    mobility_scale: float = 10.0
    stable_value: int = 10
    phase_weights: Dict[str, Dict[str, float]] = field(
        default_factory=lambda: {k: dict(v) for k, v in PHASE_WEIGHTS.items()}
    )


@dataclass
class UIConfig:
    engine_name: str = "FlipMate"


@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = "config.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        # naive merge; unknown keys are ignored
        if "search" in raw:
            for k, v in raw["search"].items():
                if k == "difficulties":
                    for name, values in v.items():
                        base = cfg.search.difficulties.get(name, DifficultyConfig(name, 4, 1000))
                        cfg.search.difficulties[name] = replace(base, **values)
                elif hasattr(cfg.search, k):
                    setattr(cfg.search, k, v)
        if "eval" in raw:
            for k, v in raw["eval"].items():
                if hasattr(cfg.eval, k):
                    setattr(cfg.eval, k, v)
        if "ui" in raw:
            for k, v in raw["ui"].items():
                if hasattr(cfg.ui, k):
                    setattr(cfg.ui, k, v)
        if "log_level" in raw:
            cfg.log_level = raw["log_level"]
        return cfg


# single globally importable config instance
CONFIG = Config.load_from_toml(os.environ.get("OTHELLO_CONFIG_TOML", "config.toml"))
# allow env override of the default tier for quick debugging
override_difficulty = os.environ.get("OTHELLO_DIFFICULTY")
if override_difficulty in CONFIG.search.difficulties:
    CONFIG.search.default_difficulty = override_difficulty
