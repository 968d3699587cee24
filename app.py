"""
Card Clicker Web App
Streamlit interface for playing runs and running simulations.
"""

import pandas as pd
import streamlit as st
from pathlib import Path

from card_clicker.engine.bets import bets_by_category
from card_clicker.engine.decks import DECK_PRESETS
from card_clicker.engine.game import GamePhase
from card_clicker.engine.persistence import ProfileStore, SaveStore
from card_clicker.engine.profiles import is_deck_unlocked
from card_clicker.engine.session import GameSession
from card_clicker.engine.upgrades import describe_effect
from card_clicker.presets import PRESETS
from card_clicker.simulator import Simulator

DATA_DIR = Path(__file__).parent / ".card_clicker"

# Page config
st.set_page_config(
    page_title="Card Clicker",
    page_icon="🃏",
    layout="wide"
)

st.title("🃏 Card Clicker")
st.markdown("*Bet on the next card, beat the target, buy relics*")


@st.cache_resource
def get_simulator():
    return Simulator()


def get_session() -> GameSession:
    if "session" not in st.session_state:
        st.session_state.session = GameSession(
            save_store=SaveStore(DATA_DIR / "saves"),
            profile_store=ProfileStore(DATA_DIR / "profiles.json"),
        )
    return st.session_state.session


def act(result):
    """Apply an action, skipping presentational delays."""
    session = get_session()
    session.flush()
    if result.message:
        st.session_state.flash = (result.accepted, result.message)


def render_play():
    session = get_session()
    state = session.state

    # Profiles
    names = {p.id: f"{p.name} (best round {p.best_round})" for p in session.profiles}
    chosen = st.sidebar.selectbox("Profile", options=list(names), format_func=names.get,
                                  index=list(names).index(session.active_profile_id))
    if chosen != session.active_profile_id:
        session.switch_profile(chosen)
        st.rerun()
    new_name = st.sidebar.text_input("New profile name")
    if st.sidebar.button("Create profile") and not session.create_profile(new_name):
        st.sidebar.error(session.last_message)

    flash = st.session_state.pop("flash", None)
    if flash:
        (st.success if flash[0] else st.warning)(flash[1])
    for deck_id in session.newly_unlocked:
        st.balloons()
        st.info(f"Unlocked deck: {deck_id}")
    session.newly_unlocked.clear()

    if state.game_phase in (GamePhase.MENU, GamePhase.GAME_OVER):
        if state.game_phase == GamePhase.GAME_OVER:
            st.error(f"💀 Game over in round {state.round_number} "
                     f"({state.round_score}/{state.round_target})")
        elif state.has_run and st.button("▶️ Continue run", type="primary"):
            act(session.continue_run())
            st.rerun()

        st.subheader("Choose a deck")
        cols = st.columns(3)
        for i, preset in enumerate(DECK_PRESETS):
            unlocked = is_deck_unlocked(session.profile, preset.id)
            with cols[i % 3]:
                st.markdown(f"**{preset.name}**")
                st.caption(preset.description)
                if not unlocked:
                    st.caption(f"🔒 {preset.requirement.label}")
                if st.button("Start", key=f"start-{preset.id}", disabled=not unlocked):
                    act(session.start_run(preset.id))
                    st.rerun()
        return

    # Header metrics
    col1, col2, col3, col4, col5 = st.columns(5)
    col1.metric("Round", state.round_number)
    col2.metric("Score", f"{state.round_score}/{state.round_target}")
    col3.metric("Draws", state.draws_remaining)
    col4.metric("Bank", state.bank)
    col5.metric("Combo", state.combo_streak)

    boss = state.boss.boss
    if boss:
        st.warning(f"👹 **{boss.name}**: {boss.description}")

    if state.game_phase == GamePhase.GAMEPLAY:
        disabled = state.boss.disabled_bet_ids()
        for category, bets in bets_by_category(disabled).items():
            locked = state.locked_bet_category == category
            st.markdown(f"**{category.value}**" + (" 🔒" if locked else ""))
            cols = st.columns(max(len(bets), 1))
            for col, bet in zip(cols, bets):
                selected = bet.id == state.selected_bet_id
                label = f"{'✅ ' if selected else ''}{bet.label} {bet.base_multiplier}×"
                if col.button(label, key=f"bet-{bet.id}", disabled=locked):
                    act(session.select_bet(bet.id))
                    st.rerun()

        col1, col2, col3 = st.columns(3)
        if col1.button("🎴 Draw", type="primary", disabled=state.selected_bet_id is None):
            act(session.draw())
            st.rerun()
        if state.target_achieved:
            if col2.button("🏁 Finish round"):
                act(session.finish_round())
                st.rerun()
            if state.draws_remaining and col3.button(f"💰 Cash out {state.draws_remaining} draws"):
                act(session.cash_out())
                st.rerun()

        if state.recent_cards:
            st.subheader("Recent cards")
            st.dataframe(pd.DataFrame([
                {"Card": str(e.card), "Bet": e.bet_id, "Hit": "✅" if e.hit else "❌", "Gain": e.gain}
                for e in state.recent_cards
            ]), hide_index=True)

    elif state.game_phase in (GamePhase.SHOP, GamePhase.SHOP_TRANSITION):
        st.subheader("🛒 Shop")
        cols = st.columns(4)
        for i, offer in enumerate(state.current_shop_choices):
            with cols[i % 4]:
                st.markdown(f"{offer.icon} **{offer.name}** · {offer.rarity.value}")
                st.caption(offer.description)
                st.caption("; ".join(describe_effect(e) for e in offer.effects))
                bought = offer.id in state.purchased_shop_ids
                if st.button("Sold" if bought else f"Buy ({offer.cost})", key=f"buy-{offer.id}",
                             disabled=bought or offer.cost > state.bank):
                    act(session.buy(offer.id))
                    st.rerun()
        if st.button("➡️ Next round", type="primary"):
            act(session.proceed())
            st.rerun()

    if state.owned_upgrades:
        st.subheader("Relics")
        st.markdown(" ".join(f"{u.icon} {u.name}" for u in state.owned_upgrades))
        if state.transformations_completed:
            st.caption("Transformations: " + ", ".join(state.transformations_completed))

    st.divider()
    col1, col2 = st.columns(2)
    if col1.button("⏸️ Menu"):
        act(session.return_to_menu())
        st.rerun()
    if col2.button("🗑️ Abandon run"):
        act(session.reset_to_menu())
        st.rerun()


def render_single_run(preset_id: str):
    sim = get_simulator()
    with st.spinner("Running simulation..."):
        result = sim.run(preset_id, verbose=False)

    if result.survived:
        st.success(f"🏆 Survived to round {result.round_reached}")
    else:
        st.error(f"💀 Game over in round {result.round_reached}")

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Rounds Cleared", result.rounds_cleared)
    with col2:
        st.metric("Final Bank", result.final_bank)
    with col3:
        st.metric("Hit Rate", f"{result.hit_rate:.0f}%")
    with col4:
        bosses_beat = sum(1 for r in result.round_history if r.boss_name and r.success)
        st.metric("Bosses Defeated", f"{bosses_beat}/{len(result.bosses_encountered)}")

    st.subheader("📜 Run Timeline")
    for i, rnd in enumerate(result.round_history):
        icon = "✅" if rnd.success else "❌"
        label = f"**BOSS: {rnd.boss_name}**" if rnd.boss_name else f"Round {rnd.round_number}"
        margin_str = f"+{rnd.margin_pct:.0f}%" if rnd.margin_pct > 0 else f"{rnd.margin_pct:.0f}%"
        with st.expander(f"{icon} {label} ({rnd.score:,} / {rnd.target:,}) {margin_str}"):
            col1, col2, col3 = st.columns(3)
            with col1:
                st.write(f"**Score:** {rnd.score:,}")
                st.write(f"**Target:** {rnd.target:,}")
            with col2:
                st.write(f"**Draws Used:** {rnd.draws_used}")
                st.write(f"**Hits:** {rnd.hits}")
            with col3:
                st.write(f"**Interest:** {rnd.interest_earned}")
                if rnd.cashed_out_draws:
                    st.write(f"**Cashed Out:** {rnd.cashed_out_draws} draws")

        if i < len(result.shop_history):
            shop = result.shop_history[i]
            if shop.relics_bought:
                st.caption(f"  🛒 Shop: {', '.join(shop.relics_bought)} (-{shop.bank_spent})")

    st.divider()
    col1, col2 = st.columns(2)
    with col1:
        st.subheader("🔮 Relics")
        if result.relics_collected:
            for relic in result.relics_collected:
                st.markdown(f"- {relic}")
        else:
            st.markdown("*None collected*")
    with col2:
        st.subheader("🧬 Transformations")
        if result.transformations:
            for set_id in result.transformations:
                st.markdown(f"- {set_id.title()}")
        else:
            st.markdown("*None completed*")


def render_batch(preset_id: str, num_runs: int):
    sim = get_simulator()
    progress_bar = st.progress(0)
    status_text = st.empty()

    summaries = []
    for i in range(num_runs):
        summaries.append(sim.run(preset_id, verbose=False))
        progress_bar.progress((i + 1) / num_runs)
        status_text.text(f"Run {i + 1}/{num_runs}...")

    progress_bar.empty()
    status_text.empty()

    df = pd.DataFrame([s.to_dict() for s in summaries])
    df["hit_rate"] = [s.hit_rate for s in summaries]

    st.subheader(f"Results ({num_runs} runs)")
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Avg Rounds Cleared", f"{df['rounds_cleared'].mean():.1f}")
    with col2:
        st.metric("Max Round", int(df["round_reached"].max()))
    with col3:
        st.metric("Avg Bank", f"{df['final_bank'].mean():.0f}")
    with col4:
        st.metric("Avg Hit Rate", f"{df['hit_rate'].mean():.1f}%")

    st.subheader("Round Distribution")
    chart_data = df.groupby("round_reached").size().rename("Runs").to_frame()
    st.bar_chart(chart_data)


# Sidebar for settings
st.sidebar.header("Settings")
mode = st.sidebar.radio("Mode", ["Play", "Single Run", "Batch Runs"])

if mode == "Play":
    render_play()
else:
    preset_options = list(PRESETS.keys())
    selected_preset = st.sidebar.selectbox(
        "Preset",
        options=preset_options,
        format_func=lambda x: PRESETS[x].name
    )
    preset = PRESETS[selected_preset]
    st.sidebar.markdown(f"*{preset.description}*")
    st.sidebar.markdown(f"**Deck:** {preset.deck_id} · **Strategy:** {preset.strategy.value}")

    if mode == "Batch Runs":
        num_runs = st.sidebar.slider("Number of Runs", min_value=10, max_value=500, value=100, step=10)

    st.divider()
    if st.button("🎲 Run Simulation", type="primary", use_container_width=True):
        if mode == "Single Run":
            render_single_run(selected_preset)
        else:
            render_batch(selected_preset, num_runs)

# Footer
st.divider()
st.markdown("*Built with the Card Clicker engine*")
