# Services package.
#
#   article_service    — ArticleService: console CRUD + pagination + tags
#   comment_service    — comment creation and per-article bulk removal
#   statistic_service  — per-blog counters
#   user_service       — author lookup / creation
#
# The collaborator modules expose async functions taking an AsyncSession
# as their first argument; they never begin or commit, the caller's
# transaction governs them.  ArticleService owns its sessions and runs each
# operation in a single transaction.
