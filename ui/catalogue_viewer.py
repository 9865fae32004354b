"""
FireSync Catalogue Viewer.

Streamlit page listing every weapon with its round, balance score and DPS,
plus a per-weapon balance simulation. Run with:

    streamlit run ui/catalogue_viewer.py
"""

import os
import sys
from typing import Dict, List, Tuple

import streamlit as st

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from sim.catalogue import default_catalogue_path, load_catalogue
from sim.config import GameConfig, load_config
from sim.engine import RoundEngine
from sim.errors import FireSyncError
from sim.mechanics import display_score, dps
from sim.runner import simulate_matchups
from sim.state import Catalogue

# ---------------- Page Config ----------------
st.set_page_config(page_title="FireSync – Catalogue", layout="wide")


@st.cache_data
def _load(path: str, config_path: str) -> Tuple[Catalogue, GameConfig]:
    config = load_config(config_path or None)
    catalogue = load_catalogue(path, capacity=config.capacity, weights=config.weights)
    return catalogue, config


def catalogue_rows(catalogue: Catalogue, tiers) -> List[Dict]:
    """One display row per weapon, tagged with the round that offers it."""
    round_of = {}
    for n, tier in tiers.items():
        for i in range(tier.start, tier.end):
            round_of[i] = n

    rows = []
    for i, record in enumerate(catalogue):
        row = record.to_dict()
        row["round"] = round_of.get(i)
        row["score"] = round(display_score(catalogue.score(i)), 3)
        row["dps"] = round(dps(record), 1)
        rows.append(row)
    return rows


st.title("FireSync Weapon Catalogue")

path = st.sidebar.text_input("Catalogue file", value=default_catalogue_path())
config_path = st.sidebar.text_input("Config file (JSON, optional)", value="")

try:
    catalogue, config = _load(path, config_path.strip())
    engine = RoundEngine(catalogue, config=config)
except FireSyncError as e:
    st.error(f"Could not load catalogue or config: {e}")
    st.stop()

st.caption(f"{catalogue.count} weapons loaded from {catalogue.source} | {config.num_rounds} rounds")

rows = catalogue_rows(catalogue, engine.tiers)

round_filter = st.sidebar.selectbox("Round", ["All"] + list(engine.tiers))
if round_filter != "All":
    rows = [r for r in rows if r["round"] == round_filter]
    tier = engine.tiers[round_filter]
    st.subheader(f"Round {round_filter} tier")
    st.write(f"Budget increment: ${tier.budget_increment} | Weapons: {tier.size}")

st.dataframe(rows, use_container_width=True)

# ---------------- Balance Simulation ----------------
st.header("Balance simulation")
col1, col2 = st.columns(2)
with col1:
    draws = st.number_input("Draws per weapon", min_value=10, max_value=100000, value=1000, step=100)
with col2:
    seed = st.number_input("Seed", min_value=0, value=42, step=1)

if st.button("Run simulation"):
    results = simulate_matchups(catalogue, int(draws), config=config, seed=int(seed))
    for r in results:
        r["score"] = round(display_score(r["score"]), 3)
        r["win_rate"] = round(r["win_rate"] * 100, 1)
        r["expected_win_rate"] = round(r["expected_win_rate"] * 100, 1)
    st.dataframe(results, use_container_width=True)
