from .greedy_agent import GreedyAgent, greedy_decision

__all__ = ["GreedyAgent", "greedy_decision"]
