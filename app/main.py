"""
Streamlit Frontend for Kegelbuch

This is the table the club treasurer fills in during a bowling evening.

DESIGN PRINCIPLES:
1. One table per evening: name | penalties | games | total
2. Every edit is saved immediately (no "Save" button)
3. Typos in numbers never block input (they count as zero)
4. Failures are shown, never swallowed

The UI holds no ledger state of its own. Everything lives in the
KegelbuchApp created once per server process.
"""

import streamlit as st

from kegelbuch.models.ledger import OperationResult
from kegelbuch.orchestrator import KegelbuchApp, create_app
from kegelbuch.services.storage import InMemoryStorage
from kegelbuch.settlement import editable_amount, format_amount
from kegelbuch.validation import coerce_amount, coerce_count


# Page configuration
st.set_page_config(
    page_title="Kegelbuch",
    page_icon="🎳",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_app() -> KegelbuchApp:
    """Get or create the application (cached)."""
    app = create_app(use_storage=True)
    if isinstance(app.storage, InMemoryStorage):
        st.error("Failed to open the data directory. Changes are kept in memory only.")
    return app


def report(result: OperationResult, success_message: str = "") -> None:
    """Show the outcome of an operation."""
    if not result.success:
        if result.error_code != "not_found":
            st.error(result.message)
    elif not result.persisted:
        st.warning(result.message)
    elif success_message:
        st.toast(success_message)


def main():
    """Main application entry point."""
    app = get_app()

    st.sidebar.title("🎳 Kegelbuch")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["🎳 Evening", "👥 Players", "⚙️ Settings", "💾 Backup"],
        index=0,
    )

    if page == "🎳 Evening":
        render_evening_page(app)
    elif page == "👥 Players":
        render_players_page(app)
    elif page == "⚙️ Settings":
        render_settings_page(app)
    elif page == "💾 Backup":
        render_backup_page(app)


def render_evening_picker(app: KegelbuchApp) -> None:
    """Buttons for all previous evenings; the current one is highlighted."""
    evenings = app.evenings
    if not evenings:
        return

    st.markdown("#### Previous evenings")
    current = app.current_evening
    columns = st.columns(min(len(evenings), 6))
    for index, evening in enumerate(evenings):
        label = evening.date.strftime("%d.%m.%Y")
        if evening.closed:
            label += " ✓"
        is_current = current is not None and current.id == evening.id
        with columns[index % len(columns)]:
            if st.button(label, key=f"pick-{evening.id}", type="primary" if is_current else "secondary"):
                app.evening_store.select_evening(evening)
                st.rerun()


def render_evening_page(app: KegelbuchApp):
    """Render the table of the current evening."""
    st.title("🎳 Evening")

    if st.button("➕ New evening", type="primary"):
        report(app.evening_store.create_evening())
        st.rerun()

    evening = app.current_evening
    if evening is None:
        st.info("No evening selected. Start a new one with the button above.")
        render_evening_picker(app)
        return

    config = app.configuration
    store = app.evening_store

    col1, col2 = st.columns([1, 3])
    with col1:
        new_date = st.date_input("Evening of", value=evening.date, key=f"date-{evening.id}")
        if new_date != evening.date:
            report(store.set_date(evening, new_date))
        closed = st.checkbox("Closed", value=evening.closed, key=f"closed-{evening.id}")
        if closed != evening.closed:
            report(store.set_closed(evening, closed))
    with col2:
        notes = st.text_area("Notes", value=evening.notes, key=f"notes-{evening.id}")
        if notes != evening.notes:
            report(store.set_notes(evening, notes))

    st.markdown("---")

    # Header row
    widths = [3, 1] + [1] * len(config.penalties) + [1] * len(config.game_types) + [1, 1]
    header = st.columns(widths)
    header[0].markdown("**Name**")
    header[1].markdown(f"**Start ({format_amount(config.entry_fee, config.currency_symbol)})**")
    offset = 2
    for i, penalty in enumerate(config.penalties):
        marker = " ↺" if penalty.inverted else ""
        header[offset + i].markdown(f"**{penalty.label}{marker}**", help=penalty.description)
    offset += len(config.penalties)
    for i, game_type in enumerate(config.game_types):
        header[offset + i].markdown(f"**{game_type.label}**", help=game_type.description)
    header[-2].markdown("**Total**")

    settlement = app.settle(evening)

    for player in evening.players:
        row = st.columns(widths)
        key = f"{evening.id}-{player.id}"

        name = row[0].text_input("Name", value=player.name, key=f"name-{key}", label_visibility="collapsed")
        if name != player.name:
            report(store.rename_player(evening, player, name))

        present = row[1].checkbox("present", value=player.present, key=f"present-{key}")
        if present != player.present:
            report(store.set_present(evening, player, present))

        offset = 2
        for i, penalty in enumerate(config.penalties):
            current = player.count_for(penalty.id)
            raw = row[offset + i].text_input(
                penalty.label,
                value=str(current) if current else "",
                key=f"pen-{key}-{penalty.id}",
                label_visibility="collapsed",
            )
            if coerce_count(raw) != current:
                report(store.set_penalty_count(evening, player, penalty.id, raw))
                st.rerun()
        offset += len(config.penalties)

        for i, game_type in enumerate(config.game_types):
            current = player.game_results.get(game_type.id, "")
            value = row[offset + i].text_input(
                game_type.label,
                value=current,
                key=f"game-{key}-{game_type.id}",
                label_visibility="collapsed",
            )
            if value != current:
                report(store.set_game_result(evening, player, game_type.id, value))

        total = settlement.for_player(player.id).total if settlement else 0.0
        row[-2].markdown(f"**{format_amount(total, config.currency_symbol)}**")

        if row[-1].button("🗑️", key=f"del-{key}"):
            report(store.remove_player(evening, player))
            st.rerun()

    # Add player
    st.markdown("---")
    col1, col2 = st.columns([3, 1])
    with col1:
        suggestions = [n for n in app.roster.names if not evening.has_player_named(n)]
        choice = st.selectbox("Saved player", options=[""] + suggestions, key=f"saved-{evening.id}")
        new_name = st.text_input("…or new name", key=f"new-{evening.id}")
    with col2:
        if st.button("➕ Add player"):
            result = app.add_player(new_name or choice, evening)
            report(result)
            if result.success:
                st.rerun()

    if settlement:
        st.markdown(
            f"### Grand total: {format_amount(settlement.grand_total, config.currency_symbol)}"
        )

    render_evening_picker(app)


def render_players_page(app: KegelbuchApp):
    """Render the saved player names."""
    st.title("👥 Saved players")

    new_name = st.text_input("Name")
    if st.button("➕ Save name") and new_name:
        result = app.roster.add_name(new_name)
        report(result, f"{new_name.strip()} saved")
        st.rerun()

    for name in app.roster.names:
        col1, col2 = st.columns([4, 1])
        col1.write(name)
        if col2.button("🗑️", key=f"roster-{name}"):
            report(app.roster.remove_name(name))
            st.rerun()


def render_settings_page(app: KegelbuchApp):
    """Render the fee schedule editor."""
    st.title("⚙️ Settings")
    config = app.configuration
    store = app.configuration_store

    col1, col2 = st.columns(2)
    with col1:
        shown_fee = editable_amount(config.entry_fee)
        fee = st.text_input("Entry fee", value=shown_fee)
        if fee != shown_fee and coerce_amount(fee) != config.entry_fee:
            report(store.set_entry_fee(fee))
            st.rerun()
    with col2:
        symbol = st.text_input("Currency symbol", value=config.currency_symbol)
        if symbol != config.currency_symbol:
            report(store.set_currency_symbol(symbol))

    st.markdown("### Penalties")
    for penalty in config.penalties:
        col1, col2, col3 = st.columns([3, 1, 1])
        kind = "others pay" if penalty.inverted else "player pays"
        col1.markdown(f"**{penalty.label}** ({kind}) - {penalty.description}")
        shown_price = editable_amount(penalty.unit_price)
        price = col2.text_input(
            "Price", value=shown_price, key=f"price-{penalty.id}",
            label_visibility="collapsed",
        )
        if price != shown_price and coerce_amount(price) != penalty.unit_price:
            report(store.set_penalty_price(penalty.id, price))
            st.rerun()
        if col3.button("🗑️", key=f"rm-pen-{penalty.id}"):
            report(store.remove_penalty(penalty.id))
            st.rerun()

    with st.form("add_penalty", clear_on_submit=True):
        st.markdown("**New penalty**")
        label = st.text_input("Label")
        description = st.text_input("Description")
        price = st.text_input("Price", value="0.50")
        inverted = st.checkbox("All other players pay")
        if st.form_submit_button("➕ Add penalty"):
            report(app.add_penalty(label, description, price, inverted), f"{label} added")

    st.markdown("### Game types")
    for game_type in config.game_types:
        col1, col2 = st.columns([4, 1])
        col1.markdown(f"**{game_type.label}** - {game_type.description}")
        if col2.button("🗑️", key=f"rm-game-{game_type.id}"):
            report(store.remove_game_type(game_type.id))
            st.rerun()

    with st.form("add_game_type", clear_on_submit=True):
        st.markdown("**New game type**")
        label = st.text_input("Label")
        description = st.text_input("Description")
        if st.form_submit_button("➕ Add game type"):
            report(app.add_game_type(label, description), f"{label} added")

    st.markdown("---")
    if st.button("↩️ Reset fee schedule to defaults"):
        report(store.reset_to_defaults(), "Defaults restored")
        st.rerun()

    st.markdown("### Status")
    from kegelbuch.config import validate_all_settings

    status = validate_all_settings()
    for name, key in [("Storage", "storage"), ("Logging", "logging"), ("Application", "app")]:
        if status.get(key, False):
            st.success(f"✅ {name} settings OK")
        else:
            st.error(f"❌ {name} settings - {status.get(f'{key}_error', 'invalid')}")

    with st.expander("Recent changes"):
        for event in reversed(app.audit_logger.recent_events[-20:]):
            st.text(f"{event.timestamp:%H:%M:%S}  {event.description}")


def render_backup_page(app: KegelbuchApp):
    """Render export / import."""
    st.title("💾 Backup")

    st.markdown("### Export")
    st.download_button(
        "⬇️ Download all data",
        data=app.export_document(),
        file_name=app.export_filename(),
        mime="application/json",
    )

    st.markdown("### Import")
    st.warning("Importing replaces the data contained in the file.")
    uploaded = st.file_uploader("Export file", type=["json"])
    if uploaded and st.button("⬆️ Import", type="primary"):
        result = app.import_snapshot(uploaded.getvalue())
        if result.success:
            report(result, "Import successful!")
        else:
            st.error("Import failed! " + result.message)

    st.markdown("---")
    st.markdown("### Danger zone")
    confirm = st.checkbox("I really want to delete everything")
    if st.button("Delete all data", disabled=not confirm):
        report(app.clear_all_data(), "All data deleted")
        st.rerun()


if __name__ == "__main__":
    main()
