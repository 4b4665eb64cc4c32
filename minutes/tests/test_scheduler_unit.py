from minutes.editor.scheduler import ReanalysisScheduler


def test_scheduled_work_waits_for_delay(clock) -> None:
    scheduler = ReanalysisScheduler(delay_ms=50, clock=clock)
    scheduler.schedule_event("keyup")
    assert scheduler.pending is True

    clock.advance_ms(20)
    assert scheduler.flush_due() == frozenset()

    clock.advance_ms(40)
    assert scheduler.flush_due() == frozenset({"analyze"})
    assert scheduler.pending is False
    assert scheduler.flush_due() == frozenset()


def test_latest_event_pushes_deadline_and_merges_tasks(clock) -> None:
    scheduler = ReanalysisScheduler(delay_ms=50, clock=clock)
    scheduler.schedule_event("input")
    clock.advance_ms(30)
    scheduler.schedule_event("click")

    clock.advance_ms(30)
    assert scheduler.flush_due() == frozenset()

    clock.advance_ms(30)
    assert scheduler.flush_due() == frozenset({"analyze", "restyle"})


def test_composition_end_requests_restyle(clock) -> None:
    scheduler = ReanalysisScheduler(delay_ms=50, clock=clock)
    scheduler.schedule_event("compositionend")
    assert scheduler.flush_due(clock.now + 1.0) == frozenset({"analyze", "restyle"})


def test_cancel_drops_pending_work(clock) -> None:
    scheduler = ReanalysisScheduler(delay_ms=50, clock=clock)
    scheduler.schedule_event("input")
    scheduler.cancel()
    clock.advance_ms(100)
    assert scheduler.pending is False
    assert scheduler.deadline is None
    assert scheduler.flush_due() == frozenset()
