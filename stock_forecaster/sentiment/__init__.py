"""
Lexicon-based news sentiment.

Modules
-------
lexicon : Fixed finance-oriented positive / negative word lists.
scorer  : analyze_sentiment() per text, score_news_item() at ingestion,
          aggregate_sentiment() time-decay weighting across a news list.
"""
