"""Prompt templates for task planning.

Consumed by :class:`~sayso.core.intent.planner.TaskPlanner` to turn one
spoken request into a list of dependent tasks.
"""

PLANNER_SYSTEM_PROMPT: str = """Analyse the user's request, identify every task that must be carried out, and return JSON:
{
  "summary": "One-line summary of the overall intent",
  "tasks": [
    {
      "id": "task_1",
      "skill": "create_doc|create_folder|send_message",
      "platform": "feishu|slack",
      "input": "The part of the request this task handles",
      "depends_on": []
    }
  ]
}

Skills:
- create_doc: create a document
- create_folder: create a folder
- send_message: send a message

Platform detection:
- feishu: Feishu / Lark, personal names, ids starting with ou_ or oc_. This is the default.
- slack: Slack, "channel", channel names starting with #

## Dependencies (very important)

Set depends_on in these cases:

1. Sequencing words: when the request says "then", "after that", "afterwards",
   "once it is done", "when finished", the later task depends on the earlier one.

2. Referencing an earlier result:
   - "send the link to", "share the document" -> depends on create_doc
   - "send the folder link" -> depends on create_folder

3. Implied dependencies: creating a resource and sending it to someone means
   create first, then send the link.
   - "create a doc and send it to Alice" = create_doc + send_message (depends_on create_doc)

When a task needs a value produced by an earlier task, write the matching
placeholder in its input: {{doc_url}}, {{doc_id}}, {{folder_url}}, {{folder_id}}.

## Examples

Example 1 - "Tell Alice the meeting is at 3" (no dependencies):
{"summary":"Meeting notice","tasks":[{"id":"task_1","skill":"send_message","platform":"feishu","input":"Tell Alice the meeting is at 3","depends_on":[]}]}

Example 2 - "Post the release note to Feishu and Slack" (parallel, no dependencies):
{"summary":"Multi-platform announcement","tasks":[
  {"id":"task_1","skill":"send_message","platform":"feishu","input":"Post the release note","depends_on":[]},
  {"id":"task_2","skill":"send_message","platform":"slack","input":"Post the release note","depends_on":[]}
]}

Example 3 - "Create the weekly report, then send the link to Alice" (dependent):
{"summary":"Create and share a document","tasks":[
  {"id":"task_1","skill":"create_doc","platform":"feishu","input":"Create the weekly report document","depends_on":[]},
  {"id":"task_2","skill":"send_message","platform":"feishu","input":"Send the document link to Alice (needs {{doc_url}})","depends_on":["task_1"]}
]}

Example 4 - "Create meeting minutes and send them to ou_xxx" (dependent):
{"summary":"Create and share a document","tasks":[
  {"id":"task_1","skill":"create_doc","platform":"feishu","input":"Create meeting minutes","depends_on":[]},
  {"id":"task_2","skill":"send_message","platform":"feishu","input":"Send the document link to ou_xxx (needs {{doc_url}})","depends_on":["task_1"]}
]}

If the request matches none of the skills, return {"summary": "...", "tasks": []}.
Return JSON only."""

PLANNER_USER_TEMPLATE: str = "User request: {user_text}"

REQUESTER_LINE: str = "Current user ID: {user_id}"

CONTACTS_HEADER: str = "Known contacts (use these ids when the request names them):"
