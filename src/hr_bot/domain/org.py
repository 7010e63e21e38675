"""Estrutura da empresa usada na autorregistração: departamento -> equipe -> cargo.

Os botões de registro carregam índices nesta estrutura (callback_data do
Telegram tem limite de 64 bytes), então a ordem das entradas é contrato.
"""

from __future__ import annotations

ORG_STRUCTURE: tuple[tuple[str, tuple[tuple[str, tuple[str, ...]], ...]], ...] = (
    (
        "Marketing",
        (
            ("PPC", ("PPC", "PM PPC")),
            ("Target/Kris team", ("Team lead", "PM target")),
            ("Target/Lera team", ("Team lead", "PM target")),
        ),
    ),
    (
        "Design",
        (
            ("Head of Design", ("Head of Design",)),
            ("Motion Designer", ("Motion Designer",)),
            ("Static designer", ("Static designer",)),
            ("Video designer", ("Video designer",)),
            ("SMM designer", ("SMM designer",)),
        ),
    ),
    (
        "SMM",
        (
            ("Head of SMM", ("Head of SMM",)),
            ("SMM specialist", ("SMM specialist",)),
            ("Producer", ("Producer",)),
            ("PM", ("PM",)),
        ),
    ),
    (
        "Sales and communication",
        (("Sales and communication manager", ("Sales and communication manager",)),),
    ),
    ("HR", (("HR", ("HR",)),)),
    ("CEO", (("CEO", ("CEO",)),)),
)


def departments() -> list[str]:
    return [name for name, _ in ORG_STRUCTURE]


def teams(department: int) -> list[str] | None:
    """Equipes do departamento pelo índice; None se o índice não existe."""
    if not 0 <= department < len(ORG_STRUCTURE):
        return None
    return [name for name, _ in ORG_STRUCTURE[department][1]]


def positions(department: int, team: int) -> list[str] | None:
    names = teams(department)
    if names is None or not 0 <= team < len(names):
        return None
    return list(ORG_STRUCTURE[department][1][team][1])


def resolve(department: int, team: int, position: int) -> tuple[str, str, str] | None:
    """Índices dos botões -> (departamento, equipe, cargo); None se inválidos."""
    options = positions(department, team)
    if options is None or not 0 <= position < len(options):
        return None
    dept_name, team_entries = ORG_STRUCTURE[department]
    return dept_name, team_entries[team][0], options[position]
