from importlib import resources


def load_modifier_help() -> str:
    with resources.files(__package__).joinpath("data/modifiers.txt").open("r", encoding="utf-8") as fh:
        return fh.read()
