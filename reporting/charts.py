"""Plotly chart of the top of a leaderboard, exported as standalone HTML."""

import os
from typing import Optional

import numpy as np
import pandas as pd
import plotly.graph_objects as go
import plotly.io as pio

import config
from reporting.leaderboard_report import VOLUME

COLORS = {
    'primary': '#2563eb',
    'positive': '#16a34a',
    'negative': '#dc2626',
}


def _layout(title, height=480, **kwargs):
    """Standard layout options."""
    layout = dict(
        title=dict(text=title, font=dict(size=15, color='#1e293b')),
        template='plotly_white',
        margin=dict(l=60, r=40, t=50, b=120),
        font=dict(family='-apple-system, BlinkMacSystemFont, sans-serif',
                  size=12, color='#374151'),
        height=height,
        plot_bgcolor='white',
    )
    layout.update(kwargs)
    return layout


def _short(address: str) -> str:
    return f'{address[:6]}...{address[-4:]}' if len(address) > 12 else address


def leaderboard_bar(df: pd.DataFrame, kind: str, top: int = 25) -> Optional[go.Figure]:
    """Bar chart of the top ``top`` users of a ranked leaderboard frame."""
    if df.empty:
        return None

    head = df.head(top)
    col = 'quantity' if kind == VOLUME else 'value'
    values = head[col].to_numpy(dtype=float)
    if kind == VOLUME:
        colors = np.full(len(values), COLORS['primary'])
    else:
        colors = np.where(values >= 0, COLORS['positive'], COLORS['negative'])

    fig = go.Figure(go.Bar(
        x=[_short(u) for u in head['user']],
        y=values,
        marker_color=list(colors),
        hovertext=list(head['user']),
    ))
    fig.update_layout(
        **_layout(f'{kind.upper()} leaderboard: top {len(head)}'),
        xaxis_title='User', yaxis_title=col.capitalize(), showlegend=False)
    return fig


def write_chart(fig: go.Figure, name: str, output_dir: str = config.OUTPUT_DIR) -> str:
    """Write a figure as a standalone HTML page; returns its path."""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, f'{name}.html')
    pio.write_html(fig, path, include_plotlyjs='cdn', full_html=True)
    return path
