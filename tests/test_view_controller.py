from view_controller import DEFAULT_SCALE, SCALE_STEP, ViewController


def _controller(**kwargs):
    calls = []
    view = ViewController(on_change=lambda: calls.append(1), **kwargs)
    return view, calls


def test_defaults():
    view = ViewController()
    assert view.scale == DEFAULT_SCALE == 2.1
    assert view.step == SCALE_STEP
    assert view.current_page == 1


def test_navigation_clamps_to_page_range():
    view, calls = _controller()
    view.set_total_pages(3)
    assert view.next_page()
    assert view.next_page()
    assert not view.next_page()
    assert view.current_page == 3
    assert view.go_to_page(-5)
    assert view.current_page == 1
    assert not view.prev_page()
    assert len(calls) == 3


def test_fewer_pages_pull_current_page_back():
    view, _ = _controller()
    view.set_total_pages(5)
    view.go_to_page(5)
    view.set_total_pages(2)
    assert view.current_page == 2


def test_zoom_steps_and_notifies():
    view, calls = _controller(scale=1.0, step=0.5)
    view.zoom_in()
    assert view.scale == 1.5
    view.zoom_out()
    view.zoom_out()
    assert view.scale == 0.5
    assert len(calls) == 3


def test_zoom_is_not_clamped():
    view, _ = _controller(scale=0.2, step=0.5)
    view.zoom_out()
    assert view.scale < 0


def test_reset():
    view, _ = _controller()
    view.set_total_pages(4)
    view.go_to_page(3)
    view.reset()
    assert (view.current_page, view.total_pages) == (1, 0)
