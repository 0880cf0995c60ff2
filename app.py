import concurrent.futures
import logging

import streamlit as st

import cards
import session


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

st.set_page_config(page_title="CineFlavor", page_icon="🎬", layout="centered")

GEMINI_API_KEY = st.secrets.get("GEMINI_API_KEY")
POSTER_POLL_SECONDS = 1.0

st.title("🎬 CineFlavor")
st.caption("Nuanced recommendations powered by AI.")

if not GEMINI_API_KEY:
    st.error(
        "Gemini API key is missing. Add GEMINI_API_KEY to .streamlit/secrets.toml "
        "or Streamlit Community Cloud → Settings → Secrets."
    )
    st.stop()


@st.cache_resource
def get_poster_executor():
    return concurrent.futures.ThreadPoolExecutor(max_workers=6, thread_name_prefix="poster")


state = session.init_state(st.session_state)

st.markdown(
    """
    <style>
    .poster {
        width: 100%;
        aspect-ratio: 2 / 3;
        object-fit: cover;
        border-radius: 16px;
        border: 1px solid #e6e6e6;
    }
    .poster.pending {
        display: flex;
        align-items: center;
        justify-content: center;
        background: #f1f5f9;
        color: #94a3b8;
        font-size: 10px;
        font-weight: 700;
        letter-spacing: 0.2em;
    }
    .year-badge {
        font-size: 11px;
        font-weight: 700;
        padding: 2px 6px;
        border-radius: 4px;
        background: #f1f5f9;
        color: #64748b;
    }
    </style>
    """,
    unsafe_allow_html=True,
)


if state["error"]:
    st.error(state["error"]["message"], icon="ℹ️")

if state["step"] == session.STEP_INPUT:
    st.subheader("What's a movie you love?")
    st.caption('We\'ll find your specific taste "flavor".')
    with st.form("movie-form"):
        st.text_input(
            "Movie",
            key="movie_text",
            placeholder="e.g., Inception, Parasite...",
            label_visibility="collapsed",
        )
        submitted = st.form_submit_button("Find my flavor")

    if submitted:
        state["movie_input"] = st.session_state.movie_text
        with st.spinner("Tasting the flavors..."):
            moved = session.submit_movie(state, GEMINI_API_KEY)
        if moved or state["error"]:
            st.rerun()

elif state["step"] == session.STEP_REASONS:
    head = st.columns([1, 9])
    head[0].button("↺", key="reset-reasons", help="Start over", on_click=session.reset, args=(state,))
    head[1].markdown(f'*"I like {state["movie_input"]} because..."*')

    chosen = None
    for idx, reason in enumerate(state["reasons"]):
        if st.button(f"✨ {reason}", key=f"reason-{idx}", use_container_width=True):
            chosen = reason

    if chosen:
        with st.spinner("Finding your next watch..."):
            session.select_reason(state, chosen, GEMINI_API_KEY, get_poster_executor())
        st.rerun()

elif state["step"] == session.STEP_RECOMMENDATIONS:
    head = st.columns([9, 1])
    with head[0]:
        st.subheader("Your Next Watch")
        st.caption(f"FLAVOR: {state['selected_reason']}")
    head[1].button("↺", key="reset-recs", help="Start over", on_click=session.reset, args=(state,))

    @st.fragment(run_every=POSTER_POLL_SECONDS if state["posters_pending"] else None)
    def recommendation_cards():
        was_pending = bool(state["posters_pending"])
        session.drain_poster_events(state)

        for rec in state["recommendations"]:
            poster_col, text_col = st.columns([1, 2])
            with poster_col:
                st.markdown(cards.poster_html(rec), unsafe_allow_html=True)
            with text_col:
                st.markdown(cards.title_html(rec), unsafe_allow_html=True)
                st.markdown(f'*"{rec["why"]}"*')

        # drop the polling timer
        if was_pending and not state["posters_pending"]:
            st.rerun()

    recommendation_cards()

    st.button(
        "🔍 New Search",
        key="new-search",
        on_click=session.reset,
        args=(state,),
        use_container_width=True,
    )

st.divider()
st.caption("Powered by Gemini & Imagen • Cinematic Contextual Engine")

with st.sidebar:
    with st.expander("Diagnostics"):
        st.write(f"Gemini key loaded: {bool(GEMINI_API_KEY)}")
        st.write(f"Step: {state['step']}")
        st.write(f"Generation: {state['generation']}")
        st.write(f"Posters pending: {len(state['posters_pending'])}")
        if state["error"]:
            st.write(f"Last error kind: {state['error']['kind']}")
            st.caption(state["error"]["detail"])
