"""Live-reload patch — injects the client script into rendered documents.

The script is inserted immediately before the first ``</html>``.  It:

1. Opens an ``EventSource`` on ``/sse`` and replaces the whole document with
   every message it receives.
2. Re-attaches the data-editing overlay after each swap (restoring whether it
   was open and where the caret was) and re-dispatches ``DOMContentLoaded``
   so page scripts run again against the new markup.
3. Removes its own ``<script>`` element, so the swapped-in markup (which is
   rendered unpatched) never starts a second stream.

The overlay is a fixed textarea prefilled with the pretty-printed render
context.  Cmd/Ctrl+E toggles it (``#editor`` in the URL opens it on load),
the background turns red while the content is not a JSON object,
Cmd/Ctrl+S or Cmd/Ctrl+Enter posts it to ``/data``, and Cmd/Ctrl+Shift+F
reformats it.
"""

from __future__ import annotations

import json

CLOSING_TAG = b"</html>"

SSE_PATH = "/sse"
DATA_PATH = "/data"

_DATA_PLACEHOLDER = "__GLANCE_DATA__"

_RELOAD_SCRIPT = """\
<script id="glance-live-reload" data-glance-reload>
(function() {
  var src = new EventSource('/sse');
  src.addEventListener('message', function(e) {
    var editor = document.getElementById('glance-editor');
    var open = !!editor && editor.style.display !== 'none';
    var pos = editor ? editor.selectionStart : 0;
    document.documentElement.innerHTML = e.data;
    if (window.glanceAddEditor) {
      window.glanceAddEditor();
      editor = document.getElementById('glance-editor');
      editor.selectionStart = pos;
      if (open) {
        editor.style.display = 'block';
        editor.focus();
      }
    }
    document.dispatchEvent(new Event('DOMContentLoaded'));
  });
  var self = document.getElementById('glance-live-reload');
  if (self) self.remove();
})();
</script>
"""

_EDITOR_SCRIPT = """\
<script id="glance-editor-script" data-glance-editor>
(function() {
  var editorData = __GLANCE_DATA__;
  var valid = true;

  function isObject(text) {
    try {
      var obj = JSON.parse(text);
      return obj !== null && typeof obj === 'object' && !Array.isArray(obj);
    } catch (x) {
      return false;
    }
  }

  function save() {
    if (!valid) return;
    fetch('/data', {method: 'POST', body: editorData});
  }

  window.glanceAddEditor = function() {
    var old = document.getElementById('glance-editor');
    if (old) old.remove();
    var editor = document.createElement('textarea');
    editor.id = 'glance-editor';
    editor.spellcheck = false;
    editor.style.cssText = 'display:none;padding:0.5em;position:fixed;top:0;bottom:0;'
      + 'right:0;width:33%;background:rgb(50,50,50);color:white;font-size:0.8em;'
      + 'font-family:ui-monospace,monospace;outline:none;z-index:99999';
    if (window.location.hash === '#editor') editor.style.display = 'block';
    editor.value = editorData;
    editor.addEventListener('input', function() {
      editorData = editor.value;
      valid = isObject(editorData);
      editor.style.background = valid ? 'rgb(50,50,50)' : 'rgb(100,50,50)';
    });
    editor.addEventListener('keydown', function(e) {
      var mod = e.metaKey || e.ctrlKey;
      if (!mod) return;
      if (e.key === 's' || e.key === 'Enter') {
        e.preventDefault();
        e.stopPropagation();
        save();
      } else if (valid && e.shiftKey && (e.key === 'f' || e.key === 'F')) {
        e.preventDefault();
        editor.value = JSON.stringify(JSON.parse(editorData), null, 4);
        editorData = editor.value;
      }
    });
    document.body.appendChild(editor);
  };

  document.addEventListener('keydown', function(e) {
    if (!(e.metaKey || e.ctrlKey) || e.key !== 'e') return;
    var editor = document.getElementById('glance-editor');
    if (!editor) return;
    e.preventDefault();
    if (editor.style.display === 'none') {
      editor.style.display = 'block';
      window.location.hash = 'editor';
      editor.focus();
    } else {
      editor.style.display = 'none';
      window.location.hash = '';
    }
  });

  if (document.body) {
    window.glanceAddEditor();
  } else {
    window.addEventListener('load', window.glanceAddEditor);
  }
  var self = document.getElementById('glance-editor-script');
  if (self) self.remove();
})();
</script>
"""


def _js_string(text: str) -> str:
    """Encode *text* as a JavaScript string literal safe inside ``<script>``."""
    return json.dumps(text).replace("</", "<\\/")


def client_script(data_json: str | None) -> str:
    """Build the injected block.

    Args:
        data_json: Pretty-printed render context for the editing overlay, or
            None to leave the overlay out.

    """
    if data_json is None:
        return _RELOAD_SCRIPT
    return _EDITOR_SCRIPT.replace(_DATA_PLACEHOLDER, _js_string(data_json)) + _RELOAD_SCRIPT


def patch(document: bytes, data_json: str | None = None) -> bytes:
    """Insert the client script before the first ``</html>`` of *document*.

    Documents without a closing tag are returned unchanged.
    """
    pos = document.find(CLOSING_TAG)
    if pos < 0:
        return document
    block = client_script(data_json).encode("utf-8")
    return document[:pos] + block + document[pos:]
