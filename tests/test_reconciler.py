from livesubs.transcript.reconciler import (
    ReconcileMode,
    TranscriptReconciler,
    TranscriptState,
    flush,
    merge_window,
    reconcile,
)


def test_reconcile_confirms_words_once():
    state = TranscriptState()
    outputs = [
        reconcile(state, text)
        for text in ("hello ", "hello wor", "hello world ", "hello world today")
    ]

    assert outputs == ["hello", "", "world", ""]
    confirmed = " ".join(part for part in outputs if part).split()
    assert confirmed.count("hello") == 1
    assert confirmed == ["hello", "world"]


def test_reconcile_holds_back_single_unstable_word():
    state = TranscriptState()
    assert reconcile(state, "hel") == ""
    assert reconcile(state, "hello") == ""
    assert state.previous == "hello"


def test_reconcile_first_step_keeps_all_but_last_word():
    state = TranscriptState()
    assert reconcile(state, "hi there") == "hi"
    assert reconcile(state, "hi there how") == "there"
    assert reconcile(state, "hi there how are you") == "how are"


def test_flush_releases_the_trailing_word():
    state = TranscriptState()
    reconcile(state, "good morning every")
    assert flush(state, "good morning everyone") == "everyone"


def test_reconcile_does_not_repair_recognizer_reset():
    state = TranscriptState()
    reconcile(state, "one two three four")
    # Shorter transcript after a reset: best effort, no exception.
    assert reconcile(state, "five six") == ""
    assert state.previous == "five six"


def test_merge_window_drops_overlapping_words():
    state = TranscriptState()
    assert merge_window(state, "the quick brown fox") == "the quick brown fox"
    assert merge_window(state, "Brown fox jumps over") == "jumps over"
    assert merge_window(state, "something new") == "something new"


def test_reconciler_modes_and_reset():
    cumulative = TranscriptReconciler()
    assert cumulative.mode is ReconcileMode.CUMULATIVE
    assert cumulative.push("a b c") == "a b"
    assert cumulative.finish("a b c d") == "c d"
    cumulative.reset()
    assert cumulative.state.previous == " "

    per_window = TranscriptReconciler("per_window")
    assert per_window.push("hello there") == "hello there"
    assert per_window.finish("there friend") == "friend"


def test_concatenated_output_has_no_repeated_sequences():
    reconciler = TranscriptReconciler()
    script = [
        "we",
        "we are",
        "we are going to",
        "we are going to the",
        "we are going to the market today",
    ]
    parts = [reconciler.push(text) for text in script[:-1]]
    parts.append(reconciler.finish(script[-1]))
    words = " ".join(p for p in parts if p).split()
    assert words == script[-1].split()
