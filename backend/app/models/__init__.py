# Collection registry
