import collections
import logging
import queue

import flavor_picker
from errors import FlavorError


STEP_INPUT = "input"
STEP_REASONS = "reasons"
STEP_RECOMMENDATIONS = "recommendations"

REASONS_ERROR = "I couldn't analyze that movie. Please try another one."
RECOMMENDATIONS_ERROR = "Failed to get recommendations. Try again."

PosterEvent = collections.namedtuple("PosterEvent", ["generation", "index", "poster_url"])

logger = logging.getLogger(__name__)


def init_state(state):
    state.setdefault("step", STEP_INPUT)
    state.setdefault("movie_input", "")
    state.setdefault("reasons", [])
    state.setdefault("selected_reason", None)
    state.setdefault("recommendations", [])
    state.setdefault("error", None)
    state.setdefault("generation", 0)
    state.setdefault("poster_events", queue.Queue())
    state.setdefault("posters_pending", set())
    state.setdefault("poster_futures", [])
    return state


def submit_movie(state, api_key):
    if state["step"] != STEP_INPUT:
        logger.warning("Ignoring movie submit while on step %r", state["step"])
        return False

    movie = (state["movie_input"] or "").strip()
    if not movie:
        return False

    state["error"] = None
    try:
        reasons = flavor_picker.fetch_reasons(movie, api_key)
    except FlavorError as exc:
        _record_error(state, exc, REASONS_ERROR)
        return False

    state["reasons"] = reasons
    state["step"] = STEP_REASONS
    return True


def select_reason(state, reason, api_key, executor):
    if state["step"] != STEP_REASONS:
        logger.warning("Ignoring reason selection while on step %r", state["step"])
        return False
    if reason not in state["reasons"]:
        logger.warning("Ignoring unknown reason %r", reason)
        return False

    state["error"] = None
    try:
        recommendations = flavor_picker.fetch_recommendations(
            state["movie_input"], reason, api_key
        )
    except FlavorError as exc:
        _record_error(state, exc, RECOMMENDATIONS_ERROR)
        return False

    state["generation"] += 1
    state["selected_reason"] = reason
    state["recommendations"] = recommendations
    state["step"] = STEP_RECOMMENDATIONS
    start_posters(state, api_key, executor)
    return True


def reset(state):
    _cancel_posters(state)
    state["generation"] += 1
    state["step"] = STEP_INPUT
    state["movie_input"] = ""
    state["reasons"] = []
    state["selected_reason"] = None
    state["recommendations"] = []
    state["error"] = None
    state["posters_pending"] = set()


def start_posters(state, api_key, executor):
    generation = state["generation"]
    events = state["poster_events"]
    recommendations = state["recommendations"]

    state["posters_pending"] = set(range(len(recommendations)))
    state["poster_futures"] = [
        executor.submit(
            _paint_poster, events, generation, index, rec["title"], rec["year"], api_key
        )
        for index, rec in enumerate(recommendations)
    ]


def apply_poster_event(state, event):
    if event.generation != state["generation"]:
        logger.debug("Dropping stale poster for generation %d", event.generation)
        return None

    state["posters_pending"].discard(event.index)
    if event.poster_url is None:
        return event.index

    updated = list(state["recommendations"])
    updated[event.index] = dict(updated[event.index], poster_url=event.poster_url)
    state["recommendations"] = updated
    return event.index


def wait_for_posters(state, timeout=None):
    events = state["poster_events"]
    while state["posters_pending"]:
        try:
            event = events.get(timeout=timeout)
        except queue.Empty:
            logger.warning(
                "Gave up waiting on %d poster(s)", len(state["posters_pending"])
            )
            return
        index = apply_poster_event(state, event)
        if index is not None:
            yield index


def drain_poster_events(state):
    events = state["poster_events"]
    updated = []
    while True:
        try:
            event = events.get_nowait()
        except queue.Empty:
            return updated
        index = apply_poster_event(state, event)
        if index is not None:
            updated.append(index)


def _paint_poster(events, generation, index, title, year, api_key):
    # Runs on a worker thread: must not touch session state.
    try:
        poster_url = flavor_picker.generate_poster(title, year, api_key)
    except FlavorError as exc:
        logger.warning("Poster generation failed for %r (%s): %s", title, year, exc)
        poster_url = None
    except Exception:
        logger.exception("Poster job crashed for %r (%s)", title, year)
        poster_url = None
    events.put(PosterEvent(generation, index, poster_url))


def _cancel_posters(state):
    for future in state["poster_futures"]:
        future.cancel()
    state["poster_futures"] = []


def _record_error(state, exc, message):
    logger.error("%s [%s] %s", message, exc.kind.value, exc.detail)
    state["error"] = exc.as_dict(message)
