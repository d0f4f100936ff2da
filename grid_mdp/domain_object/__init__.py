from .position import Position
from .direction import Direction
from .action import Action, ActionKind
from .transition import Transition, Reward
from .analysis import Analysis
