# Schemas module
