"""
Inventory Sync Dashboard

A Streamlit dashboard for managing SKU records and syncing stock with Shopify.
Run with: streamlit run app.py
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

import streamlit as st
import plotly.graph_objects as go

from clients.shopify_client import ShopifyClient
from clients.store_client import InventoryStore
from core import settings
from core.analysis import (
    compute_key_metrics,
    filter_inventory,
    records_to_frame,
    stock_by_design,
    status_breakdown,
)
from core.csv_io import import_csv, records_to_csv
from core.errors import ConflictError, NotFoundError, PushError, StoreError, SyncError
from core.logger import setup_logger
from core.models import InventoryFields
from core.quality import inventory_quality_report
from core.state import SyncStateStore
from core.sync import SyncEngine

logger = setup_logger()

# Page config
st.set_page_config(
    page_title="Inventory Sync Dashboard",
    page_icon="📦",
    layout="wide",
)

st.title("📦 Inventory Sync Dashboard")


@st.cache_resource
def get_store() -> InventoryStore:
    return InventoryStore(settings.DATABASE_URL)


@st.cache_resource
def get_engine() -> SyncEngine:
    return SyncEngine(get_store(), ShopifyClient())


state_store = SyncStateStore()
store = get_store()
engine = get_engine()

# --- Session State ---
st.session_state.setdefault("syncing", False)
st.session_state.setdefault("sync_log", [])
st.session_state.setdefault("sync_message", None)


def run_sync(label: str, action) -> None:
    """Run one engine procedure with the syncing flag held."""
    st.session_state.syncing = True
    try:
        with st.spinner(f"{label}..."):
            result = action()
    except SyncError as e:
        logger.error("%s aborted: %s", label, e)
        st.session_state.sync_message = ("error", f"{label} aborted: {e}")
        st.session_state.sync_log = []
    else:
        if hasattr(result, "sync_state"):
            state_store.save(result.sync_state)
        st.session_state.sync_message = ("success", result.message())
        st.session_state.sync_log = result.log
    finally:
        st.session_state.syncing = False


records = store.list()
inventory_df = records_to_frame(records)
key_metrics = compute_key_metrics(inventory_df)

# --- Key Metrics Row ---
col1, col2, col3, col4 = st.columns(4)

with col1:
    st.metric("SKUs", f"{key_metrics['total_skus']}")

with col2:
    st.metric(
        "Sellable Units",
        f"{key_metrics['sellable_units']:,}",
        delta=f"{key_metrics['total_units']:,} total incl. unusable/hold",
        delta_color="off",
    )

with col3:
    st.metric(
        "Critical",
        f"{key_metrics['critical_count']}",
        delta="Below reorder level",
        delta_color="inverse",
    )

with col4:
    st.metric(
        "Out of Stock",
        f"{key_metrics['out_of_stock_count']}",
        delta="Nothing sellable",
        delta_color="inverse",
    )

st.divider()

# --- Two Column Layout ---
left_col, right_col = st.columns([2, 1])

with left_col:
    st.subheader("🗂️ Inventory")

    f1, f2, f3 = st.columns([2, 1, 1])
    with f1:
        search = st.text_input("Search name, local name or SKU")
    with f2:
        design_options = sorted(d for d in inventory_df["design"].unique() if d)
        design_filter = st.multiselect("Design", design_options)
    with f3:
        status_filter = st.multiselect("Status", settings.STOCK_STATUSES)

    filtered = filter_inventory(inventory_df, search, design_filter, status_filter)

    status_emoji = {"out_of_stock": "🔴", "critical": "🟠", "in_stock": "🟢"}
    display_df = filtered[
        [
            "product_name",
            "local_name",
            "sku",
            "sellable_stock",
            "unusable_stock",
            "hold_stock",
            "total",
            "design",
            "color",
            "supplier",
            "reorder_level",
            "status",
        ]
    ].copy()
    display_df["status"] = display_df["status"].apply(
        lambda s: f"{status_emoji.get(s, '')} {s.replace('_', ' ')}"
    )
    display_df.columns = [
        "Product",
        "Local Name",
        "SKU",
        "Sellable",
        "Unusable",
        "Hold",
        "Total",
        "Design",
        "Color",
        "Supplier",
        "Reorder At",
        "Status",
    ]
    st.dataframe(display_df, use_container_width=True, hide_index=True)
    st.caption(f"Showing {len(filtered)} of {len(inventory_df)} records")

with right_col:
    st.subheader("🛒 Shopify")

    state = state_store.load()
    connected = engine.storefront.check_connection()
    if connected:
        st.success("Connected")
    else:
        st.warning("Not connected: set SHOPIFY_STORE_URL and SHOPIFY_ACCESS_TOKEN")
    st.caption(
        f"Last sync: {state.last_sync_time:%Y-%m-%d %H:%M UTC}"
        if state.last_sync_time
        else "Last sync: never"
    )

    busy = st.session_state.syncing or not connected

    if st.button("⬇️ Import catalog", disabled=busy, use_container_width=True):
        run_sync("Catalog import", lambda: engine.import_catalog(state_store.load()))
        st.rerun()

    if st.button("🧾 Sync orders", disabled=busy, use_container_width=True):
        run_sync("Order sync", lambda: engine.apply_orders(state_store.load()))
        st.rerun()

    if st.button("⬆️ Push all stock", disabled=busy, use_container_width=True):
        run_sync("Stock push", lambda: engine.bulk_push_stock(store.list()))
        st.rerun()

    if st.session_state.sync_message:
        kind, text = st.session_state.sync_message
        (st.error if kind == "error" else st.success)(text)

    if st.session_state.sync_log:
        with st.expander(f"📋 Sync log ({len(st.session_state.sync_log)} entries)"):
            st.code("\n".join(st.session_state.sync_log), language=None)

st.divider()

# --- Record Management ---
add_col, edit_col = st.columns(2)


def record_form_fields(defaults: InventoryFields, key: str) -> dict:
    c1, c2 = st.columns(2)
    with c1:
        product_name = st.text_input("Product name", defaults.product_name, key=f"{key}_name")
        local_name = st.text_input("Local name", defaults.local_name, key=f"{key}_local")
        sku = st.text_input("SKU", defaults.sku, key=f"{key}_sku")
        design = st.text_input("Design", defaults.design, key=f"{key}_design")
        color = st.text_input("Color", defaults.color, key=f"{key}_color")
    with c2:
        sellable = st.number_input("Sellable", 0, value=defaults.sellable_stock, key=f"{key}_sell")
        unusable = st.number_input("Unusable", 0, value=defaults.unusable_stock, key=f"{key}_unus")
        hold = st.number_input("Hold", 0, value=defaults.hold_stock, key=f"{key}_hold")
        reorder = st.number_input("Reorder level", 0, value=defaults.reorder_level, key=f"{key}_reorder")
        supplier = st.text_input("Supplier", defaults.supplier, key=f"{key}_supplier")
    return {
        "product_name": product_name.strip(),
        "local_name": local_name.strip(),
        "sku": sku.strip(),
        "design": design.strip(),
        "color": color.strip(),
        "supplier": supplier.strip(),
        "sellable_stock": int(sellable),
        "unusable_stock": int(unusable),
        "hold_stock": int(hold),
        "reorder_level": int(reorder),
    }


with add_col:
    st.subheader("➕ Add Item")
    with st.form("add_item", clear_on_submit=True):
        values = record_form_fields(InventoryFields(), "add")
        if st.form_submit_button("Add item"):
            if not values["product_name"]:
                st.error("Product name is required")
            else:
                try:
                    store.insert(InventoryFields(**values))
                except StoreError as e:
                    st.error(str(e))
                else:
                    st.rerun()

with edit_col:
    st.subheader("✏️ Edit Item")
    if records:
        labels = {r.id: f"{r.product_name or '(unnamed)'} [{r.sku or 'no SKU'}]" for r in records}
        selected_id = st.selectbox("Record", list(labels), format_func=labels.get)
        selected = next(r for r in records if r.id == selected_id)

        with st.form(f"edit_item_{selected.id}_{selected.version}"):
            values = record_form_fields(selected.editable_fields(), f"edit_{selected.id}")
            save = st.form_submit_button("Save changes")
        if save:
            try:
                store.update(selected.id, values, expected_version=selected.version)
            except ConflictError:
                st.error("This record was changed elsewhere. Reload the page and edit again.")
            except (StoreError, NotFoundError) as e:
                st.error(str(e))
            else:
                st.rerun()

        b1, b2 = st.columns(2)
        with b1:
            if st.button("⬆️ Push to Shopify", disabled=busy, use_container_width=True):
                try:
                    engine.push_stock(selected)
                except PushError as e:
                    st.error(str(e))
                else:
                    st.success(f"Pushed {selected.sku}: {selected.sellable_stock}")
        with b2:
            if st.button("🗑️ Delete", use_container_width=True):
                try:
                    store.delete(selected.id)
                except (StoreError, NotFoundError) as e:
                    st.error(str(e))
                else:
                    st.rerun()
    else:
        st.info("No records yet. Add one, upload a CSV or import from Shopify.")

st.divider()

# --- CSV Import / Export ---
st.subheader("📄 CSV")
csv_col1, csv_col2 = st.columns(2)

with csv_col1:
    uploaded = st.file_uploader("Import records", type=["csv"])
    if uploaded is not None and st.button("Import CSV"):
        result = import_csv(store, uploaded.getvalue().decode("utf-8-sig"))
        for issue in result.quality_report.issues:
            icon = "🔴" if issue.severity == "critical" else "🟡" if issue.severity == "warning" else "🔵"
            st.markdown(f"{icon} {issue.column}: {issue.description}")
        st.success(result.message())
        with st.expander("Import log"):
            st.code("\n".join(result.log), language=None)

with csv_col2:
    st.download_button(
        "Export records",
        data=records_to_csv(records),
        file_name="inventory.csv",
        mime="text/csv",
        use_container_width=True,
    )
    st.caption("Columns: " + ", ".join(settings.CSV_COLUMNS))

st.divider()

# --- Charts ---
chart_col1, chart_col2 = st.columns([2, 1])

with chart_col1:
    by_design = stock_by_design(inventory_df)
    fig_design = go.Figure(
        data=[
            go.Bar(name="Sellable", x=by_design["design"], y=by_design["sellable_stock"], marker_color="#2ecc71"),
            go.Bar(name="Unusable", x=by_design["design"], y=by_design["unusable_stock"], marker_color="#e74c3c"),
            go.Bar(name="Hold", x=by_design["design"], y=by_design["hold_stock"], marker_color="#f1c40f"),
        ]
    )
    fig_design.update_layout(
        title="Units by Design",
        barmode="stack",
        height=320,
        margin=dict(t=40, b=20, l=20, r=20),
        legend=dict(orientation="h", yanchor="bottom", y=-0.3),
    )
    st.plotly_chart(fig_design, use_container_width=True)

with chart_col2:
    breakdown = status_breakdown(inventory_df)
    fig_status = go.Figure(
        data=[
            go.Pie(
                labels=[s.replace("_", " ") for s in breakdown],
                values=list(breakdown.values()),
                hole=0.4,
                marker_colors=["#e74c3c", "#e67e22", "#2ecc71"],
            )
        ]
    )
    fig_status.update_layout(
        title="Stock Status",
        height=320,
        margin=dict(t=40, b=20, l=20, r=20),
    )
    st.plotly_chart(fig_status, use_container_width=True)

# --- Data Quality ---
with st.expander("🔧 Data quality: SKUs the sync can't match reliably"):
    report = inventory_quality_report(records)
    if report.issues:
        for issue in report.issues:
            icon = "🔴" if issue.severity == "critical" else "🟡" if issue.severity == "warning" else "🔵"
            samples = f" (e.g. {', '.join(map(str, issue.sample_values))})" if issue.sample_values else ""
            st.markdown(f"{icon} {issue.column}: {issue.description}{samples}")
    else:
        st.markdown("✅ No issues found")

# --- Footer ---
st.caption(
    f"Store: {store.identity} | Shopify API {settings.SHOPIFY_API_VERSION} | "
    "Order sync deducts each order once per run; re-running before the sync time "
    "is saved can deduct it again."
)
