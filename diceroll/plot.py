"""Sampled probability distributions of dice expressions, and charts of them."""
import io
import typing

import pandas
import plotly.express as px

import diceroll.tree as tree
from diceroll.config import Settings
from diceroll.roll_parser import RegexDice
from diceroll.visitor import DiceRollingVisitor, RandomSource


def _roll_many(
    expression: typing.Union[str, tree.Expression],
    trials: int,
    random_source: typing.Optional[RandomSource],
    settings: typing.Optional[Settings],
) -> pandas.Series:
    if trials < 1:
        raise ValueError("trials must be at least 1, got %s" % trials)
    if isinstance(expression, str):
        expression = RegexDice(settings).parse(expression)
    visitor = DiceRollingVisitor(random_source, settings)
    return pandas.Series([visitor.visit(expression).value for _ in range(trials)])


def sample(
    expression: typing.Union[str, tree.Expression],
    trials: int,
    random_source: typing.Optional[RandomSource] = None,
    settings: typing.Optional[Settings] = None,
) -> pandas.DataFrame:
    """Roll ``expression`` ``trials`` times and tabulate how often each value came up.

    Returns a frame with ``value`` and ``probability`` columns, sorted by value.
    """
    counts = _roll_many(expression, trials, random_source, settings)
    counts = counts.value_counts(normalize=True).sort_index()
    return pandas.DataFrame(
        {"value": counts.index.astype(int), "probability": counts.to_numpy()}
    )


def summarize(
    expression: typing.Union[str, tree.Expression],
    trials: int,
    random_source: typing.Optional[RandomSource] = None,
    settings: typing.Optional[Settings] = None,
) -> typing.Dict[str, float]:
    values = _roll_many(expression, trials, random_source, settings)
    return {
        "mean": float(values.mean()),
        "min": int(values.min()),
        "max": int(values.max()),
    }


def figure(
    expressions: typing.Sequence[str],
    trials: int,
    random_source: typing.Optional[RandomSource] = None,
    settings: typing.Optional[Settings] = None,
):
    columns = {
        expression: sample(expression, trials, random_source, settings)
        .set_index("value")["probability"]
        for expression in expressions
    }
    data = pandas.DataFrame(columns).fillna(0.0).sort_index()
    data = data.rename_axis("value").reset_index()

    fig = px.bar(data, x="value", y=list(columns), barmode="overlay")
    fig.update_xaxes(title_text="value")
    fig.update_yaxes(title_text="probability", tickformat="%")
    return fig


def plot(
    expressions: typing.Sequence[str],
    trials: int,
    random_source: typing.Optional[RandomSource] = None,
    settings: typing.Optional[Settings] = None,
) -> bytes:
    """Render the sampled distributions of ``expressions`` as one PNG chart."""
    fig = figure(expressions, trials, random_source, settings)
    stream = io.BytesIO()
    fig.write_image(file=stream, format="png")
    return stream.getvalue()
