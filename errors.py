class TableError(Exception):
    """Base for every rejected table event. State is never changed when raised."""

    kind = "error"


class ValidationError(TableError):
    """Malformed or out-of-range input (name, delta, chat text)."""

    kind = "validation"


class CapacityError(TableError):
    """No free seat left."""

    kind = "capacity"


class PreconditionError(TableError):
    """Event not valid in the current phase, e.g. dealing the turn before the flop."""

    kind = "precondition"
