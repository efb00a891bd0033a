"""
Streamlit UI for Rulequote.

Features:
- Quote builder with editable line items and live totals
- Saved quotes list with document download
- Active rules view and reload
"""
from decimal import Decimal, InvalidOperation

import pandas as pd
import streamlit as st

from rulequote.api.state import build_state
from rulequote.engine import MAX_QUANTITY, MAX_UNIT_PRICE, CustomerTier, InvalidInput, LineItem
from rulequote.logging_config import setup_logging
from rulequote.rules import RulesConfigError


st.set_page_config(
    page_title="Rulequote",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_state():
    """Get cached application state (rules store, engine, services)."""
    state = build_state()
    setup_logging(state.settings.log_level)
    return state


try:
    state = get_state()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()


def items_from_editor(df: pd.DataFrame) -> tuple[list[LineItem], list[str]]:
    """Turn edited rows into LineItems, collecting row errors instead of raising."""
    items, errors = [], []
    for index, row in df.iterrows():
        description = str(row.get('description') or '').strip()
        if not description:
            continue
        try:
            quantity = int(row['quantity'])
            unit_price = Decimal(str(row['unit_price']))
        except (TypeError, ValueError, InvalidOperation):
            errors.append(f"Row {index + 1}: quantity and unit price must be numbers")
            continue
        items.append(LineItem(description=description, quantity=quantity, unit_price=unit_price))
    return items, errors


# ============================================================================
# SIDEBAR: Customer
# ============================================================================
with st.sidebar:
    st.header("👤 Customer")

    with st.container(border=True):
        customer_name = st.text_input("Name")
        customer_email = st.text_input("Email")
        customer_type = st.selectbox(
            "Customer Type",
            options=list(CustomerTier),
            format_func=lambda t: t.label,
        )
        notes = st.text_area("Notes")

    st.divider()

    config = state.rules_store.current()
    rule = config.discount_rule_for(customer_type)
    if config.discounts_enabled:
        st.success(
            f"🔧 {customer_type.label}: {rule.percentage * 100:.0f}% off from "
            f"${rule.threshold_amount:,.2f}"
        )
    else:
        st.warning("⚠️ Discounts disabled")


st.title("Rulequote")

tab1, tab2, tab3 = st.tabs(["⚡ Quote Builder", "📄 Quotes", "🔧 Rules"])


# ============================================================================
# TAB 1: QUOTE BUILDER
# ============================================================================
with tab1:
    if 'items_df' not in st.session_state:
        st.session_state.items_df = pd.DataFrame(
            [{"description": "", "quantity": 1, "unit_price": 0.0}]
        )

    col1, col2 = st.columns([1.8, 1.2], gap="large")

    with col1:
        st.subheader("Line Items")
        edited = st.data_editor(
            st.session_state.items_df,
            num_rows="dynamic",
            use_container_width=True,
            column_config={
                "description": st.column_config.TextColumn("Description"),
                "quantity": st.column_config.NumberColumn("Quantity", min_value=1, max_value=MAX_QUANTITY, step=1),
                "unit_price": st.column_config.NumberColumn(
                    "Unit Price", min_value=0.0, max_value=float(MAX_UNIT_PRICE), format="$%.2f"),
            },
            key="items_editor",
        )
        items, row_errors = items_from_editor(edited)
        for err in row_errors:
            st.warning(err)

    with col2:
        st.subheader("Totals")
        try:
            totals = state.quotes.preview_totals(items, customer_type)
        except InvalidInput as e:
            st.error(str(e))
            totals = None

        if totals:
            m1, m2 = st.columns(2)
            m1.metric("Subtotal", f"${totals.subtotal:,.2f}")
            m2.metric("Discount", f"-${totals.discount_amount:,.2f}")
            m3, m4 = st.columns(2)
            m3.metric("Tax", f"${totals.tax_amount:,.2f}")
            m4.metric("Total", f"${totals.total:,.2f}")

            with st.expander("🔍 How was this calculated?", expanded=True):
                for line in totals.explanation_lines:
                    st.caption(line)

        save = st.button("💾 Save Quote", type="primary", disabled=not items)
        if save:
            if not customer_name or not customer_email:
                st.error("Customer name and email are required")
            else:
                try:
                    quote = state.quotes.create_quote(
                        customer_name=customer_name,
                        customer_email=customer_email,
                        customer_type=customer_type,
                        items=items,
                        notes=notes or None,
                    )
                    st.success(f"Saved quote {quote.id}")
                except InvalidInput as e:
                    st.error(str(e))


# ============================================================================
# TAB 2: SAVED QUOTES
# ============================================================================
with tab2:
    quotes = state.quotes.list_quotes()
    if not quotes:
        st.info("No quotes yet")
    else:
        summary = pd.DataFrame([
            {
                "ID": q.id,
                "Customer": q.customer_name,
                "Type": q.customer_type.label,
                "Items": len(q.items),
                "Subtotal": float(q.subtotal),
                "Discount": float(q.discount_amount),
                "Tax": float(q.tax_amount),
                "Total": float(q.total),
                "Valid Until": q.valid_until,
            }
            for q in quotes
        ])
        st.dataframe(summary, use_container_width=True, hide_index=True)

        selected = st.selectbox("Quote", options=[q.id for q in quotes])
        if selected:
            quote = state.quotes.get_quote(selected)
            html = state.renderer.render_quote_html(quote)
            st.download_button(
                "📥 Download Document",
                data=html,
                file_name=f"quote-{quote.id}.html",
                mime="text/html",
            )


# ============================================================================
# TAB 3: RULES
# ============================================================================
with tab3:
    config = state.rules_store.current()
    rules_df = pd.DataFrame([
        {
            "Tier": tier.label,
            "Discount Threshold": float(config.discount_rules[tier].threshold_amount),
            "Discount %": float(config.discount_rules[tier].percentage * 100),
            "Tax %": float(config.tax_rates[tier] * 100),
        }
        for tier in CustomerTier
    ])
    st.dataframe(rules_df, use_container_width=True, hide_index=True)
    st.caption(
        f"Discounts {'enabled' if config.discounts_enabled else 'disabled'} | "
        f"Currency {config.currency} | Quotes valid {config.default_valid_days} days | "
        f"Source: {state.settings.rules_csv}"
    )

    if st.button("🔄 Reload Rules"):
        try:
            state.rules_store.reload()
            st.success("Rules reloaded")
            st.rerun()
        except RulesConfigError as e:
            st.error(f"Rules not reloaded: {e}")
