"""Integration tests for the page-side scripts.

Runs the scripts in headless Chromium against a page that builds a small
fiber graph by hand, so no React bundle or network access is needed.
Requires the Playwright Chromium build (``playwright install chromium``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from react_lens.browser.driver import PageDriver
from react_lens.config import LensConfig
from react_lens.errors import ComponentNotFoundError
from react_lens.inspect.resolver import resolve_by_role
from react_lens.inspect.scripts import load_script
from react_lens.inspect.session import InspectionSession

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from playwright.async_api import Page

DEMO_URL = "http://react-lens.test/"

# App > SaveButton > <button>Save</button>. The "Deep" button sits four host
# fibers below its component. The renderer only registers when a hook exists.
DEMO_HTML = """<!doctype html>
<html>
<head><title>Demo</title></head>
<body>
<div id="root"><button id="save">Save</button></div>
<div><div><div><button id="deep">Deep</button></div></div></div>
<script>
  const hostRoot = {tag: 3, return: null};
  const app = {tag: 0, type: function App() {}, memoizedProps: {}, return: hostRoot};
  const theme = {color: 'blue'};
  const props = {label: 'Save', theme: theme, style: theme};
  props.self = props;
  const saveButton = {tag: 0, type: function SaveButton() {}, memoizedProps: props, return: app};
  const saveHost = {
    tag: 5, type: 'button', stateNode: document.getElementById('save'),
    memoizedProps: {}, return: saveButton,
  };
  hostRoot.child = app;
  app.child = saveButton;
  saveButton.child = saveHost;
  document.getElementById('save').__reactFiber$demo = saveHost;
  const root = {current: hostRoot};
  hostRoot.stateNode = root;

  const panel = {tag: 0, type: function Panel() {}, memoizedProps: {}, return: null};
  let parent = panel;
  for (let i = 0; i < 3; i++) {
    parent = {tag: 5, type: 'div', memoizedProps: {}, return: parent};
  }
  const deepHost = {tag: 5, type: 'button', memoizedProps: {}, return: parent};
  document.getElementById('deep').__reactFiber$demo = deepHost;

  const hook = window.__REACT_DEVTOOLS_GLOBAL_HOOK__;
  if (hook) {
    const renderer = {rendererPackageName: 'react-dom', rendererVersion: '18.3.1', bundleType: 1};
    const id = hook.inject(renderer);
    hook.onCommitFiberRoot(id, root);
  }
</script>
</body>
</html>"""


@pytest.fixture
async def page() -> AsyncIterator[Page]:
    async with async_playwright() as playwright:
        try:
            browser = await playwright.chromium.launch(headless=True)
        except PlaywrightError as e:
            pytest.skip(f"Chromium not available: {e.message}")
        try:
            page = await browser.new_page()
            await page.route(
                DEMO_URL,
                lambda route: route.fulfill(status=200, content_type="text/html", body=DEMO_HTML),
            )
            await page.goto(DEMO_URL)
            yield page
        finally:
            await browser.close()


@pytest.mark.integration
@pytest.mark.inspect
class TestOwnerChainScript:
    async def test_self_reference_becomes_placeholder(self, page):
        details = await resolve_by_role(PageDriver(page), "button", "Save")

        assert details.name == "SaveButton"
        assert details.props["self"] == "[Circular]"
        assert details.props["label"] == "Save"

    async def test_shared_object_serialized_in_full(self, page):
        details = await resolve_by_role(PageDriver(page), "button", "Save")

        assert details.props["theme"] == {"color": "blue"}
        assert details.props["style"] == {"color": "blue"}

    async def test_owners_listed(self, page):
        details = await resolve_by_role(PageDriver(page), "button", "Save")

        assert [owner.name for owner in details.owners] == ["App"]

    async def test_walk_limit(self, page):
        driver = PageDriver(page)

        with pytest.raises(ComponentNotFoundError, match="within 2 steps"):
            await resolve_by_role(driver, "button", "Deep", max_steps=2)

        details = await resolve_by_role(driver, "button", "Deep", max_steps=20)
        assert details.name == "Panel"


@pytest.mark.integration
@pytest.mark.inspect
class TestHookScript:
    async def test_existing_inject_preserved(self, page):
        await page.evaluate(
            """() => {
                window.__baseInjected = [];
                window.__REACT_DEVTOOLS_GLOBAL_HOOK__ = {
                    renderers: new Map(),
                    inject(renderer) {
                        window.__baseInjected.push(renderer.rendererPackageName);
                        return 7;
                    },
                };
            }"""
        )

        await page.evaluate(load_script("hook.js"))
        result = await page.evaluate(
            """() => {
                const hook = window.__REACT_DEVTOOLS_GLOBAL_HOOK__;
                const id = hook.inject({rendererPackageName: 'react-dom'});
                return {id, base: window.__baseInjected, ids: [...hook.renderers.keys()]};
            }"""
        )

        assert result == {"id": 7, "base": ["react-dom"], "ids": [7]}

    async def test_rerun_is_noop(self, page):
        await page.evaluate(load_script("hook.js"))
        await page.evaluate(
            "() => { window.__firstInject = window.__REACT_DEVTOOLS_GLOBAL_HOOK__.inject; }"
        )

        await page.evaluate(load_script("hook.js"))

        assert await page.evaluate(
            "() => window.__REACT_DEVTOOLS_GLOBAL_HOOK__.inject === window.__firstInject"
        )


@pytest.mark.integration
@pytest.mark.inspect
class TestComponentMapInBrowser:
    async def test_reload_registers_renderer_and_map_is_annotated(self, page):
        session = InspectionSession(PageDriver(page), LensConfig())

        attach = await session.ensure_attached()
        text = await session.get_component_map()

        assert attach.attached is True
        assert [renderer.name for renderer in attach.renderers] == ["react-dom"]
        lines = text.splitlines()
        assert lines[0] == "React Component Tree:"
        assert lines[1] == 'App [role="button" name="Save"]'
        assert lines[2].startswith('└─ SaveButton {label="Save"')
        assert lines[2].endswith('[role="button" name="Save"]')

    async def test_markers_written_to_dom(self, page):
        session = InspectionSession(PageDriver(page), LensConfig())

        await session.get_component_map()

        markers = await page.evaluate(
            """() => {
                const el = document.getElementById('save');
                return [el.getAttribute('data-rl-role'), el.getAttribute('data-rl-name')];
            }"""
        )
        assert markers == ["button", "Save"]
