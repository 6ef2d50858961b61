from .crossover import (
    CROSSOVER_OPERATORS,
    edge_recombination_crossover,
    get_crossover,
    order_crossover,
    partially_mapped_crossover,
    recombine,
)
from .mutation import (
    MUTATION_OPERATORS,
    cut_points,
    get_mutation,
    insert_mutation,
    inversion_mutation,
    mutate,
    swap_mutation,
)
from .selection import SELECTION_KINDS, roulette_select, select_parents, tournament_select

__all__ = [
    "CROSSOVER_OPERATORS",
    "edge_recombination_crossover",
    "get_crossover",
    "order_crossover",
    "partially_mapped_crossover",
    "recombine",
    "MUTATION_OPERATORS",
    "cut_points",
    "get_mutation",
    "insert_mutation",
    "inversion_mutation",
    "mutate",
    "swap_mutation",
    "SELECTION_KINDS",
    "roulette_select",
    "select_parents",
    "tournament_select",
]
