# Error types raised while parsing and rolling dice notation.


class DiceRollError(ValueError):
    pass


class ParseError(DiceRollError):
    """No grammar rule matched the given notation."""


class InvalidComparisonToken(ParseError):
    def __init__(self, token: str):
        super().__init__("Could not parse comparison operator from '%s'" % token)
        self.token = token


class ArithmeticOverflow(DiceRollError):
    pass


class ReRollLimitExceeded(DiceRollError):
    """A die kept re-rolling past the configured limit.

    Either the random source isn't random, the trigger matches every face
    (exploding a d1), or the roller was very lucky.
    """

    def __init__(self, expression, limit: int):
        super().__init__(
            "'%s' re-rolled more than %s times; check the random source and"
            " that the trigger does not match every face" % (expression, limit)
        )
        self.expression = expression
        self.limit = limit


class ExplosionLimitExceeded(ReRollLimitExceeded):
    pass


class CompoundLimitExceeded(ReRollLimitExceeded):
    pass


class ConfigError(RuntimeError):
    """An error encountered during reading the settings file.

    Args:
        msg: The message displayed to the user on error.
    """

    def __init__(self, msg: str):
        super(ConfigError, self).__init__("%s" % (msg,))
