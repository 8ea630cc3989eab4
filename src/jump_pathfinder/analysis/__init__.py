"""Post-run analysis and plotting."""
