from scout.enrichment.pipeline import EnrichmentPipeline, EnrichmentStats

__all__ = ["EnrichmentPipeline", "EnrichmentStats"]
