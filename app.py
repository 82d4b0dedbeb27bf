"""OpenLibrary Books Dashboard - Streamlit list and detail views."""
import html
import logging

import altair as alt
import streamlit as st

from bookdash.aggregate import author_options, bucket_by_decade, compute_stats, top_author_frequencies
from bookdash.client import OpenLibraryClient
from bookdash.config import Config
from bookdash.fetch import DetailViewController, ListViewController
from bookdash.router import BOOK, Navigator, resolve
from bookdash.views import (
    MISSING,
    author_frame,
    author_label,
    author_value,
    decade_frame,
    detail_fields,
    status_message,
    summary_cards,
    table_rows,
)

config = Config()

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="OpenLibrary Books Dashboard",
    page_icon="📚",
    layout="wide",
)

# --- minimal styling ---
st.markdown(
    """
<style>
.block-container {padding-top: 1.2rem; padding-bottom: 2rem;}

.list-head {font-weight: 650; opacity: 0.75;}
.placeholder {
  width: 56px; height: 80px;
  display: flex; align-items: center; justify-content: center;
  font-size: 0.7rem; opacity: 0.7;
  border: 1px dashed rgba(120,120,120,0.5); border-radius: 6px;
}
.subjects {opacity: 0.8; font-size: 0.9rem;}
</style>
""",
    unsafe_allow_html=True,
)


@st.cache_resource
def get_client() -> OpenLibraryClient:
    return OpenLibraryClient(config)


def _session(key, factory):
    if key not in st.session_state:
        st.session_state[key] = factory()
    return st.session_state[key]


list_view: ListViewController = _session("list_view", lambda: ListViewController(query=config.DEFAULT_QUERY))
detail_view: DetailViewController = _session("detail_view", DetailViewController)
navigator: Navigator = _session("navigator", Navigator)


def go(path: str):
    st.query_params["path"] = path
    st.rerun()


def header(subtitle: str):
    st.title("📚 OpenLibrary Books Dashboard")
    st.caption(subtitle)


def controls(options, disabled: bool = False):
    """Query input and author selector; returns (query, author label)."""
    left, right = st.columns(2, gap="large")
    with left:
        query = st.text_input(
            "Search (title/keywords)",
            value=list_view.query,
            placeholder="e.g., fantasy, love, space, history...",
            disabled=disabled,
            key="query_disabled" if disabled else "query",
        )
        st.caption("Results update when the query changes (disabled on detail view)." if disabled
                   else "Results update when the query changes (via API).")
    with right:
        labels = [author_label(a) for a in options]
        current = author_label(list_view.selected_author)
        author = st.selectbox(
            "Filter by author",
            labels,
            index=labels.index(current) if current in labels else 0,
            disabled=disabled,
            key="author_disabled" if disabled else "author",
        )
        st.caption("Filter uses a different attribute than search (author).")
    return query, author


ROW_WIDTHS = [0.7, 2, 1.5, 0.7, 2]


def render_rows(rows):
    for column, label in zip(st.columns(ROW_WIDTHS), ["Cover", "Title", "Author(s)", "Year", "Subjects"]):
        column.markdown(f'<div class="list-head">{label}</div>', unsafe_allow_html=True)

    for row in rows:
        cover, title, authors, year, subjects = st.columns(ROW_WIDTHS)
        if row.cover_url:
            cover.image(row.cover_url, width=56)
        else:
            cover.markdown(f'<div class="placeholder">{row.cover}</div>', unsafe_allow_html=True)
        if title.button(row.title, key=f"open_{row.path}"):
            go(row.path)
        authors.write(row.authors)
        year.write(row.year)
        subjects.markdown(f'<div class="subjects">{html.escape(row.subjects)}</div>', unsafe_allow_html=True)


def render_charts(books):
    left, right = st.columns(2, gap="large")
    with left:
        st.subheader("Books by decade")
        frame = decade_frame(bucket_by_decade(books))
        if frame.empty:
            st.caption("No publication years in the current results.")
        else:
            st.bar_chart(frame)
    with right:
        st.subheader("Top 5 authors")
        frame = author_frame(top_author_frequencies(books))
        if frame.empty:
            st.caption("No authors in the current results.")
        else:
            donut = (
                alt.Chart(frame)
                .mark_arc(innerRadius=60)
                .encode(
                    theta=alt.Theta("count:Q"),
                    color=alt.Color("author:N", sort=list(frame["author"])),
                    tooltip=["author", "count"],
                )
            )
            st.altair_chart(donut, use_container_width=True)


def list_page():
    header("Search & filter books; explore quick stats.")

    query, author = controls(author_options(list_view.books))
    list_view.select_author(author_value(author))
    if list_view.set_query(query):
        with st.spinner("Loading…"):
            list_view.load(get_client())
        # options depend on the new result set
        st.rerun()

    books = list_view.visible_books

    # --- summary cards ---
    for column, (label, value) in zip(st.columns(5), summary_cards(compute_stats(books))):
        column.metric(label, value)

    message = status_message(list_view.state, len(books))
    if message and list_view.state.error:
        st.error(message)
    elif message:
        st.info(message)
    else:
        render_charts(books)
        st.subheader("Results")
        render_rows(table_rows(books))

    st.caption("Data: OpenLibrary Search API.")


def detail_page(work_id: str):
    header("Detail view")
    controls([None], disabled=True)

    if st.button("← Back to results", key="back"):
        detail_view.close()
        go(navigator.back().path)

    with st.spinner("Loading…"):
        state = detail_view.load(get_client(), work_id)

    if state.error:
        st.error(f"Error: {state.error}")
    elif detail_view.detail is not None:
        fields = detail_fields(detail_view.detail)
        st.header(fields.title)
        st.markdown("**Description:**")
        st.write(fields.description)
        st.markdown("**Subjects:**")
        st.write(fields.subjects)
        st.markdown("**Excerpts:**")
        if fields.excerpts:
            for excerpt in fields.excerpts:
                st.markdown(f"> *{excerpt}*")
        else:
            st.write(MISSING)
        st.caption(f"Source: OpenLibrary Works API /works/{detail_view.work_id}.json")


route = navigator.push(resolve(st.query_params.get("path")))
logger.debug(f"Rendering route {route}")

if route.name == BOOK:
    detail_page(route.work_id)
else:
    list_page()
